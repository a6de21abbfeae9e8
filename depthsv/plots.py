#!/usr/bin/env python3

import os
import logging

import plotly.graph_objects as go

from depthsv.sv_calls import SVType

logger = logging.getLogger()

CALL_COLORS = {SVType.DEL: "#a20655", SVType.DUP_TAND: "#256676"}
MAX_PLOT_BINS = 200000


def add_copy_ratios(fig, copy_ratios):
    step = max(1, len(copy_ratios) // MAX_PLOT_BINS)
    bins = copy_ratios[::step]
    fig.add_trace(go.Scattergl(
        x=[(b.start + b.end) // 2 for b in bins],
        y=[2 * pow(2.0, b.log2_ratio) for b in bins],
        name="Copy ratio bins",
        mode="markers",
        marker=dict(size=3, color="dimgray"),
        opacity=0.5,
        hoverinfo="skip"))


def add_segments(fig, segments):
    x = []
    y = []
    labels = []
    for seg in segments:
        x += [seg.interval.start, seg.interval.end, None]
        cn = seg.copy_number() if seg.num_points else None
        y += [cn, cn, None]
        labels += [f"{seg.call.name}<br>points:{seg.num_points}"] * 2 + [""]
    fig.add_trace(go.Scatter(
        x=x,
        y=y,
        name="Segments",
        line=dict(color="#7fa970", width=6),
        mode="lines",
        text=labels,
        hoverinfo="text"))


def add_calls(fig, modeled_calls):
    for sv_type, color in CALL_COLORS.items():
        x = []
        y = []
        labels = []
        for mc in modeled_calls:
            if mc.sv_type != sv_type:
                continue
            cn = 2 + mc.sv_type.copy_number_sign() * mc.copy_number_support
            x += [mc.interval.start, mc.interval.end, None]
            y += [cn, cn, None]
            lab = f"{sv_type.name} {mc.interval.start}-{mc.interval.end}<br>r:{mc.read_depth_support}<br>cluster:{mc.cluster_id}"
            labels += [lab, lab, ""]
        if not x:
            continue
        fig.add_trace(go.Scatter(
            x=x,
            y=y,
            name=sv_type.name,
            line=dict(color=color, width=3, dash="dot"),
            mode="lines+markers",
            marker=dict(size=7, symbol="diamond-wide", color=color),
            text=labels,
            hoverinfo="text"))


def plots_layout_settings(fig, contig_name, contig_length):
    fig.update_layout(
        template="plotly_white",
        font_family="Helvetica",
        font_color="black",
        title={"text": contig_name, "y": 0.95, "x": 0.5, "xanchor": "center", "yanchor": "top"},
        xaxis=dict(type="linear", range=[0, contig_length], showline=True, linecolor="dimgray"),
        yaxis=dict(title="Copy number", rangemode="nonnegative", showline=True, linecolor="dimgray"),
        legend=dict(orientation="h", xanchor="center", x=0.5, y=1.1),
        margin=dict(l=5, r=5, b=5, pad=1),
        width=1200,
        height=500)


def plot_contig(copy_ratios, segments, modeled_calls, contig_name, contig_length, out_file):
    fig = go.Figure()
    add_copy_ratios(fig, copy_ratios)
    add_segments(fig, segments)
    add_calls(fig, modeled_calls)
    plots_layout_settings(fig, contig_name, contig_length)
    fig.write_html(out_file)


def output_plots(modeled_calls, caller, out_dir):
    """
    One html plot per contig with calls
    """
    plot_dir = os.path.join(out_dir, "plots")
    if not os.path.isdir(plot_dir):
        os.makedirs(plot_dir)
    dictionary = caller.dictionary
    for contig in sorted(set(mc.interval.contig for mc in modeled_calls)):
        contig_name = dictionary.name(contig)
        logger.info(f"\tPlotting {contig_name}")
        segments = sorted((seg for seg in caller.copy_ratio_segments if seg.interval.contig == contig),
                          key=lambda s: s.interval.start)
        calls = [mc for mc in modeled_calls if mc.interval.contig == contig]
        plot_contig(caller.copy_ratios[contig], segments, calls, contig_name, dictionary.length(contig),
                    os.path.join(plot_dir, f"depthsv_{contig_name}.html"))
