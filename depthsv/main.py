#!/usr/bin/env python3

import sys
import argparse
import os
import logging

from depthsv.__version__ import __version__
from depthsv.breakpoints import get_intrachromosomal_breakpoint_pairs
from depthsv.caller import CallerArguments, LargeSimpleSVCaller
from depthsv.copy_ratio import MAX_COPY_RATIO_EVENT_SIZE, get_minimal_copy_ratios
from depthsv.errors import UserInputError
from depthsv.input_parsing import (read_assembled_contigs, read_bed_intervals, read_breakpoints,
                                   read_copy_ratio_segments, read_copy_ratios, read_dictionary_from_alignments,
                                   read_evidence_links, read_sv_calls)
from depthsv.plots import output_plots
from depthsv.progress import ProgressMeter
from depthsv.vcf_output import write_to_vcf


logger = logging.getLogger()


def _enable_logging(log_file, debug, overwrite):
    """
    Turns on logging, sets debug levels and assigns a log file
    """
    log_formatter = logging.Formatter("[%(asctime)s] %(name)s: %(levelname)s: "
                                      "%(message)s", "%Y-%m-%d %H:%M:%S")
    console_formatter = logging.Formatter("[%(asctime)s] %(levelname)s: "
                                          "%(message)s", "%Y-%m-%d %H:%M:%S")
    console_log = logging.StreamHandler()
    console_log.setFormatter(console_formatter)
    if not debug:
        console_log.setLevel(logging.INFO)

    if overwrite:
        open(log_file, "w").close()
    file_handler = logging.FileHandler(log_file, mode="a")
    file_handler.setFormatter(log_formatter)

    logger.setLevel(logging.DEBUG)
    logger.addHandler(console_log)
    logger.addHandler(file_handler)


def write_clusters(modeled_calls, dictionary, pseudocount, out_file, support_labels):
    with open(out_file, "w") as f:
        f.write("#cluster_id\tmodel_id\tcontig\tstart\tend\tsv_type\tcopy_number_support\t"
                "read_pairs\tsplit_reads\tscore\tread_depth_test\n")
        for mc in modeled_calls:
            call = mc.call
            f.write(f"{mc.cluster_id}\t{mc.model_id}\t{dictionary.name(call.contig)}\t{call.start}\t{call.end}\t"
                    f"{call.sv_type.name}\t{mc.read_depth_support}\t{call.read_pair_evidence}\t"
                    f"{call.split_read_evidence}\t{call.get_score(pseudocount)}\t"
                    f"{support_labels.get(id(call), '.')}\n")


def main():
    # default tunable parameters
    MIN_EVENT_SIZE = 500
    BREAKPOINT_PADDING = 1000
    EVIDENCE_LINK_PADDING = 100
    HMM_PADDING = 1000
    MAX_CALL_RECIPROCAL_OVERLAP = 0.8
    COUNTER_EVIDENCE_PSEUDOCOUNT = 1.0
    COPY_RATIO_BIN_TRIMMING = 0
    HMM_MAX_STATES = 10
    HMM_TRANSITION_PROB = 0.01
    HMM_VALID_STATES_MIN_FRACTION = 0.5

    parser = argparse.ArgumentParser \
        (description="Call large deletions and tandem duplications from breakpoints, "
                     "read pair evidence and copy ratios")

    parser.add_argument("--breakpoints-vcf", dest="breakpoints_vcf", metavar="path", required=True,
                        help="assembled breakend calls with MATEID and CTG_NAMES")
    parser.add_argument("--sv-calls-vcf", dest="sv_calls_vcf", metavar="path", required=True,
                        help="structural variant calls with SVTYPE and END")
    parser.add_argument("--contigs-bam", dest="contigs_bam", metavar="path", required=True,
                        help="assembled contig alignments, its header defines the sequence dictionary")
    parser.add_argument("--evidence-links", dest="evidence_links", metavar="path", required=True,
                        help="evidence target links in tab separated format")
    parser.add_argument("--copy-ratios", dest="copy_ratios", metavar="path", required=True,
                        help="binned log2 copy ratios (tsv)")
    parser.add_argument("--segments", dest="segments", metavar="path", required=True,
                        help="called copy ratio segments (seg)")
    parser.add_argument("--high-coverage-bed", dest="high_coverage_bed", metavar="path", default=None,
                        help="bed file with high coverage regions to skip in read depth tests [None]")
    parser.add_argument("--out-dir", dest="out_dir", default=None, required=True,
                        metavar="path", help="Output directory")
    parser.add_argument("--min-event-size", dest="min_event_size", default=MIN_EVENT_SIZE,
                        metavar="int", type=int, help=f"minimum event size [{MIN_EVENT_SIZE}]")
    parser.add_argument("--breakpoint-padding", dest="breakpoint_padding", default=BREAKPOINT_PADDING,
                        metavar="int", type=int, help=f"evidence search padding around breakpoints [{BREAKPOINT_PADDING}]")
    parser.add_argument("--evidence-link-padding", dest="evidence_target_link_padding",
                        default=EVIDENCE_LINK_PADDING, metavar="int", type=int,
                        help=f"evidence search padding around evidence links [{EVIDENCE_LINK_PADDING}]")
    parser.add_argument("--hmm-padding", dest="hmm_padding", default=HMM_PADDING, metavar="int", type=int,
                        help=f"padding for read depth HMM [{HMM_PADDING}]")
    parser.add_argument("--max-call-reciprocal-overlap", dest="max_call_reciprocal_overlap",
                        default=MAX_CALL_RECIPROCAL_OVERLAP, metavar="float", type=float,
                        help=f"maximum reciprocal overlap between calls [{MAX_CALL_RECIPROCAL_OVERLAP}]")
    parser.add_argument("--counter-evidence-pseudocount", dest="counter_evidence_pseudocount",
                        default=COUNTER_EVIDENCE_PSEUDOCOUNT, metavar="float", type=float,
                        help=f"pseudocount added to counter evidence [{COUNTER_EVIDENCE_PSEUDOCOUNT}]")
    parser.add_argument("--copy-ratio-bin-trimming", dest="copy_ratio_bin_trimming",
                        default=COPY_RATIO_BIN_TRIMMING, metavar="int", type=int,
                        help=f"copy ratio bins trimmed from each call end [{COPY_RATIO_BIN_TRIMMING}]")
    parser.add_argument("--hmm-max-states", dest="hmm_max_states", default=HMM_MAX_STATES,
                        metavar="int", type=int, help=f"maximum number of HMM copy number states [{HMM_MAX_STATES}]")
    parser.add_argument("--hmm-transition-prob", dest="hmm_transition_prob", default=HMM_TRANSITION_PROB,
                        metavar="float", type=float, help=f"HMM state transition probability [{HMM_TRANSITION_PROB}]")
    parser.add_argument("--hmm-valid-states-min-fraction", dest="hmm_valid_states_min_fraction",
                        default=HMM_VALID_STATES_MIN_FRACTION, metavar="float", type=float,
                        help=f"minimum fraction of bins in a supporting HMM state [{HMM_VALID_STATES_MIN_FRACTION}]")
    parser.add_argument("--call-channels", dest="call_channels", default=[0], metavar="int", type=int, nargs="+",
                        help="evidence channels whose events are reported [0]")
    parser.add_argument("--restrict-copy-ratios", dest="restrict_copy_ratios", action="store_true",
                        help="use only copy ratio bins close to breakpoint pairs and evidence links")
    parser.add_argument("--read-depth-test", dest="read_depth_test", action="store_true",
                        help="annotate calls with segment, HMM and deletion rescue read depth tests")
    parser.add_argument("--plot", dest="plot", action="store_true", help="write html plots per contig")
    parser.add_argument("--debug", dest="debug", action="store_true", help="enable debug output")
    parser.add_argument("-v", "--version", action="version", version=__version__)

    args = parser.parse_args()

    if not os.path.isdir(args.out_dir):
        os.makedirs(args.out_dir)

    log_file = os.path.join(args.out_dir, "depthsv.log")
    _enable_logging(log_file, debug=args.debug, overwrite=True)
    logger.debug("Cmd: " + " ".join(sys.argv[1:]))

    try:
        return run(args)
    except UserInputError as e:
        logger.error(e)
        return 1


def run(args):
    caller_args = CallerArguments.from_namespace(args)

    logger.info("Reading inputs")
    dictionary = read_dictionary_from_alignments(args.contigs_bam)
    breakpoints = read_breakpoints(args.breakpoints_vcf)
    sv_calls = read_sv_calls(args.sv_calls_vcf)
    contigs = read_assembled_contigs(args.contigs_bam)
    links = read_evidence_links(args.evidence_links, dictionary)
    copy_ratios = read_copy_ratios(args.copy_ratios)
    segments = read_copy_ratio_segments(args.segments, dictionary)
    high_coverage = []
    if args.high_coverage_bed:
        high_coverage = read_bed_intervals(args.high_coverage_bed, dictionary)

    if args.restrict_copy_ratios:
        paired_breakpoints = get_intrachromosomal_breakpoint_pairs(breakpoints, dictionary)
        copy_ratios = get_minimal_copy_ratios(copy_ratios, links, paired_breakpoints, dictionary,
                                              caller_args.min_event_size, MAX_COPY_RATIO_EVENT_SIZE,
                                              caller_args.breakpoint_padding + caller_args.hmm_padding,
                                              caller_args.evidence_target_link_padding + caller_args.hmm_padding)

    caller = LargeSimpleSVCaller(breakpoints, sv_calls, contigs, links, copy_ratios, segments, high_coverage,
                                 dictionary, caller_args)

    logger.info("Calling events")
    with ProgressMeter() as progress:
        modeled_calls, _ = caller.call_events(progress)
    logger.info(f"\tReported {len(modeled_calls)} calls")

    support_labels = {}
    if args.read_depth_test:
        with ProgressMeter() as progress:
            supported = caller.test_read_depth([mc.call for mc in modeled_calls], progress)
        support_labels = {id(call): label for call, label in supported}
        logger.info(f"\t{len(supported)} calls supported by read depth tests")

    pseudocount = caller_args.counter_evidence_pseudocount
    write_to_vcf(modeled_calls, dictionary, args.out_dir, pseudocount, support_labels)
    write_clusters(modeled_calls, dictionary, pseudocount, os.path.join(args.out_dir, "depthsv_clusters.tsv"),
                   support_labels)
    if args.plot:
        logger.info("Writing plots")
        output_plots(modeled_calls, caller, args.out_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
