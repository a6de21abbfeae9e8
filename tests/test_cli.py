import logging
import os
import sys

from depthsv.main import main

from conftest import DUP_LOG2, bin_log2
from test_input_parsing import BREAKPOINTS_VCF, CONTIGS_SAM, SV_CALLS_VCF, write

LINKS = ("chr1\t9999\t10099\tchr1\t19999\t20099\t+\t-\t2\t5\n"
         "chr1\t29949\t29999\tchr1\t39999\t40049\t-\t+\t0\t6\n"
         "chr1\t11999\t12049\tchr1\t14999\t15049\t-\t+\t0\t4\n")

SEGMENTS = ("@SQ\tSN:chr1\tLN:100000\n"
            "CONTIG\tSTART\tEND\tNUM_POINTS_COPY_RATIO\tMEAN_LOG2_COPY_RATIO\tCALL\n"
            "chr1\t1\t10099\t10\t0.0\t0\n"
            "chr1\t10100\t19999\t10\t-1.0\t-\n"
            "chr1\t20000\t29999\t10\t0.0\t0\n"
            f"chr1\t30000\t39999\t10\t{DUP_LOG2}\t+\n"
            "chr1\t40000\t100000\t60\t0.0\t0\n")


def copy_ratio_table():
    lines = ["@SQ\tSN:chr1\tLN:100000", "CONTIG\tSTART\tEND\tLOG2_COPY_RATIO"]
    for k in range(100):
        start = k * 1000 + 1
        lines.append(f"chr1\t{start}\t{start + 999}\t{bin_log2(start)}")
    return "\n".join(lines) + "\n"


def run_cli(monkeypatch, argv):
    handlers = list(logging.getLogger().handlers)
    monkeypatch.setattr(sys, "argv", ["depthsv"] + argv)
    try:
        return main()
    finally:
        for handler in logging.getLogger().handlers[:]:
            if handler not in handlers:
                logging.getLogger().removeHandler(handler)
                handler.close()


def input_args(tmp_path):
    return ["--breakpoints-vcf", write(tmp_path, "bnd.vcf", BREAKPOINTS_VCF),
            "--sv-calls-vcf", write(tmp_path, "calls.vcf", SV_CALLS_VCF),
            "--contigs-bam", write(tmp_path, "contigs.sam", CONTIGS_SAM),
            "--evidence-links", write(tmp_path, "links.tsv", LINKS),
            "--copy-ratios", write(tmp_path, "cr.tsv", copy_ratio_table()),
            "--segments", write(tmp_path, "cr.seg", SEGMENTS)]


def test_cli_writes_calls(tmp_path, monkeypatch):
    out_dir = tmp_path / "out"
    code = run_cli(monkeypatch, input_args(tmp_path) + ["--out-dir", str(out_dir), "--read-depth-test",
                                                        "--restrict-copy-ratios", "--plot"])
    assert code == 0

    records = [l for l in (out_dir / "depthsv.vcf").read_text().splitlines() if not l.startswith("#")]
    assert [r.split("\t")[:2] + [r.split("\t")[4]] for r in records] == [["chr1", "10100", "<DEL>"],
                                                                         ["chr1", "30000", "<DUP>"]]
    assert "SVTYPE=DEL;END=19999;SVLEN=-9900" in records[0]
    assert "RD_TEST=SEGMENTS" in records[1]

    clusters = (out_dir / "depthsv_clusters.tsv").read_text().splitlines()
    assert len(clusters) == 3
    assert clusters[2].split("\t")[:6] == ["1", "0", "chr1", "30000", "40000", "DUP_TAND"]
    assert os.path.isfile(out_dir / "plots" / "depthsv_chr1.html")
    assert os.path.isfile(out_dir / "depthsv.log")


def test_cli_reports_bad_input(tmp_path, monkeypatch):
    args = input_args(tmp_path)
    args[args.index("--segments") + 1] = write(tmp_path, "bad.seg", SEGMENTS + "chrUn\t1\t100\t1\t0.0\t0\n")
    code = run_cli(monkeypatch, args + ["--out-dir", str(tmp_path / "out")])
    assert code == 1
    assert "chrUn" in (tmp_path / "out" / "depthsv.log").read_text()
