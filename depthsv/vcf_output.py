#!/usr/bin/env python3

from datetime import datetime
import sys
import os

from depthsv.__version__ import __version__


class VcfRecord(object):
    __slots__ = ("chrom", "pos", "ID", "sv_type", "alt", "end", "sv_len", "copy_number_support",
                 "cluster_id", "evidence", "score", "read_depth_test")
    def __init__(self, chrom, pos, ID, sv_type, alt, end, sv_len, copy_number_support, cluster_id,
                 evidence, score, read_depth_test):
        self.chrom = chrom
        self.pos = pos
        self.ID = ID
        self.sv_type = sv_type
        self.alt = alt
        self.end = end
        self.sv_len = sv_len
        self.copy_number_support = copy_number_support
        self.cluster_id = cluster_id
        self.evidence = evidence
        self.score = score
        self.read_depth_test = read_depth_test

    def rd_test(self):
        if self.read_depth_test:
            return f";RD_TEST={self.read_depth_test}"
        return ""

    def info(self):
        return (f"SVTYPE={self.sv_type};END={self.end};SVLEN={self.sv_len};RD_CN={self.copy_number_support:.4f};"
                f"CLUSTER={self.cluster_id};EVIDENCE={self.evidence};SCORE={self.score:.4f}{self.rd_test()}")

    def to_vcf(self):
        return f"{self.chrom}\t{self.pos}\t{self.ID}\tN\t{self.alt}\t.\tPASS\t{self.info()}\n"


def modeled_calls_to_vcf(modeled_calls, dictionary, pseudocount, support_labels=None):
    support_labels = support_labels or {}
    vcf_list = []
    for i, mc in enumerate(modeled_calls):
        call = mc.call
        sv_len = -call.size if call.sv_type.copy_number_sign() < 0 else call.size
        score = call.get_score(pseudocount)
        if score == float("inf"):
            score = float(call.read_pair_evidence + call.split_read_evidence)
        vcf_list.append(VcfRecord(dictionary.name(call.contig), call.start, f"depthsv_{call.sv_type.name}_{i}",
                                  call.sv_type.name, call.sv_type.vcf_alt(), call.end - 1, sv_len,
                                  mc.copy_number_support, mc.cluster_id, len(call.evidence_ids), score,
                                  support_labels.get(id(call))))
    return vcf_list


def write_vcf_header(dictionary, outfile):
    outfile.write("##fileformat=VCFv4.2\n")
    outfile.write(f"##source=depthsv{__version__}\n")
    outfile.write("##CommandLine= " + " ".join(sys.argv[1:]) + "\n")
    filedate = str(datetime.now()).split(" ")[0]
    outfile.write("##fileDate=" + filedate + "\n")
    for chr_id, chr_len in dictionary.items():
        outfile.write("##contig=<ID={0},length={1}>\n".format(chr_id, chr_len))
    outfile.write('##ALT=<ID=DEL,Description="Deletion">\n')
    outfile.write('##ALT=<ID=DUP,Description="Tandem duplication">\n')
    outfile.write('##FILTER=<ID=PASS,Description="All filters passed">\n')

    outfile.write("##INFO=<ID=SVTYPE,Number=1,Type=String,Description=\"Type of structural variant\">\n")
    outfile.write("##INFO=<ID=END,Number=1,Type=Integer,Description=\"End position of the SV\">\n")
    outfile.write("##INFO=<ID=SVLEN,Number=1,Type=Integer,Description=\"Length of the SV\">\n")
    outfile.write("##INFO=<ID=RD_CN,Number=1,Type=Float,Description=\"Copy number change estimated from read depth\">\n")
    outfile.write("##INFO=<ID=CLUSTER,Number=1,Type=Integer,Description=\"Read depth model cluster ID\">\n")
    outfile.write("##INFO=<ID=EVIDENCE,Number=1,Type=Integer,Description=\"Number of supporting evidence links\">\n")
    outfile.write("##INFO=<ID=SCORE,Number=1,Type=Float,Description=\"Evidence over counter evidence score\">\n")
    outfile.write("##INFO=<ID=RD_TEST,Number=1,Type=String,Description=\"Read depth test that supports the call\">\n")
    outfile.write("#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n")


def write_to_vcf(modeled_calls, dictionary, outpath, pseudocount, support_labels=None):
    vcf_list = modeled_calls_to_vcf(modeled_calls, dictionary, pseudocount, support_labels)
    order = {name: i for i, (name, _) in enumerate(dictionary.items())}
    with open(os.path.join(outpath, "depthsv.vcf"), "w") as outfile:
        write_vcf_header(dictionary, outfile)
        for rec in sorted(vcf_list, key=lambda x: (order[x.chrom], x.pos)):
            outfile.write(rec.to_vcf())
