"""Command-line interface for contact map matching.

Provides CLI commands for pairwise and batch contact map overlap,
graph inspection, and report generation.
"""

import json
import logging
import sys
from pathlib import Path

import click

from contact_match import __version__
from contact_match.core.batch import BatchMatcher
from contact_match.core.discretize import DiscretizationMethod
from contact_match.core.engine import SoftassignParams
from contact_match.core.matcher import ContactMapMatcher
from contact_match.io.graph_io import load_contact_graph
from contact_match.io.reporter import MatchReporter
from contact_match.utils.helpers import format_residue_range

LOGGER = logging.getLogger(__name__)

_DEFAULTS = SoftassignParams()


def softassign_options(func):
    """Attach the softassign tunables as CLI options."""
    options = [
        click.option("--b0", type=float, default=_DEFAULTS.b0, show_default=True,
                     help="Initial inverse temperature"),
        click.option("--bf", type=float, default=_DEFAULTS.bf, show_default=True,
                     help="Final inverse temperature"),
        click.option("--br", type=float, default=_DEFAULTS.br, show_default=True,
                     help="Growth factor of the inverse temperature"),
        click.option("--i0", type=int, default=_DEFAULTS.i0, show_default=True,
                     help="Max assignment iterations per annealing step"),
        click.option("--i1", type=int, default=_DEFAULTS.i1, show_default=True,
                     help="Max Sinkhorn iterations per assignment iteration"),
        click.option("--eps0", type=float, default=_DEFAULTS.eps0, show_default=True,
                     help="Assignment loop convergence threshold"),
        click.option("--eps1", type=float, default=_DEFAULTS.eps1, show_default=True,
                     help="Sinkhorn loop convergence threshold"),
        click.option("--discretization",
                     type=click.Choice([m.value for m in DiscretizationMethod]),
                     default=DiscretizationMethod.GREEDY.value, show_default=True,
                     help="Discretization strategy"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_params(b0, bf, br, i0, i1, eps0, eps1) -> SoftassignParams:
    try:
        params = SoftassignParams(b0=b0, bf=bf, br=br, i0=i0, i1=i1, eps0=eps0, eps1=eps1)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e
    LOGGER.info("Softassign parameters: %s", params)
    return params


@click.group()
@click.version_option(version=__version__, prog_name="contact_match")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging.")
def cli(verbose):
    """Contact map overlap by softassign and dynamic programming.

    Finds an order-preserving correspondence between the nodes of two
    contact maps and reports the fraction of shared contacts.
    """
    if verbose:
        logging.basicConfig(level=logging.INFO, force=True)
    else:
        logging.basicConfig(level=logging.WARNING, force=True)


@cli.command()
@click.argument("graph1", type=click.Path(exists=True, dir_okay=False))
@click.argument("graph2", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Output file for results (JSON)")
@click.option("--alignment", "show_alignment", is_flag=True,
              help="Print the pairwise alignment implied by the matching")
@click.option("--mapping", "show_mapping", is_flag=True, help="Print the node mapping")
@softassign_options
def match(graph1, graph2, output, show_alignment, show_mapping,
          b0, bf, br, i0, i1, eps0, eps1, discretization):
    """Match two contact graph files.

    Computes a non-crossing node matching, the number of shared
    contacts and the normalized similarity score.
    """
    params = _build_params(b0, bf, br, i0, i1, eps0, eps1)

    try:
        g1 = load_contact_graph(graph1)
        g2 = load_contact_graph(graph2)
    except (OSError, ValueError) as e:
        click.echo(f"Error loading contact graphs: {e}", err=True)
        sys.exit(1)

    click.echo(f"  {g1.name}: {g1.n_nodes} nodes, {g1.n_edges} contacts")
    click.echo(f"  {g2.name}: {g2.n_nodes} nodes, {g2.n_edges} contacts")

    matcher = ContactMapMatcher(params=params, discretization=discretization)
    result = matcher.match(g1, g2)

    click.echo("\n" + "=" * 50)
    click.echo("MATCHING RESULTS")
    click.echo("=" * 50)
    if result.feasible:
        click.echo(f"  Shared contacts: {result.common_contacts}")
        click.echo(f"  Score:           {result.score:.2f}")
    else:
        click.echo("  Matching is INFEASIBLE")
    click.echo(f"  Matched nodes:   {result.n_matched}")
    click.echo(f"  Iterations:      {result.iterations}")
    click.echo(f"  Time:            {1000 * result.elapsed_time:.1f} msec")
    click.echo("=" * 50)

    if show_mapping:
        click.echo("\nMatch:")
        for i, j in result.matching:
            click.echo(f"    {i} -> {j}")

    if show_alignment:
        aligned1, aligned2 = result.to_alignment()
        click.echo(f"\n{g1.name}:\n{aligned1}")
        click.echo(f"{g2.name}:\n{aligned2}")

    if output:
        data = result.to_dict()
        data["matching"] = [list(pair) for pair in result.matching]
        with open(output, "w") as f:
            json.dump(data, f, indent=2)
        click.echo(f"\nResults saved to: {output}")


@cli.command()
@click.argument("graphs", nargs=-1, type=click.Path(exists=True, dir_okay=False))
@click.option("--reference", "-r", type=click.Path(exists=True, dir_okay=False),
              help="Reference graph for all-vs-reference comparison")
@click.option("--output", "-o", default="results.csv", show_default=True,
              help="Output CSV file for results")
@click.option("--json", "json_output", type=click.Path(), help="Also save results as JSON")
@click.option("--jobs", "-j", default=1, show_default=True,
              help="Number of parallel jobs (-1 for all CPUs)")
@softassign_options
def batch(graphs, reference, output, json_output, jobs,
          b0, bf, br, i0, i1, eps0, eps1, discretization):
    """Match multiple contact graphs in batch mode.

    Without --reference: performs all pairwise comparisons.
    With --reference: compares all graphs to the reference.

    Examples:

        contact_match batch *.cm -o results.csv

        contact_match batch *.cm --reference ref.cm -o results.csv
    """
    if len(graphs) < 2 and reference is None:
        click.echo("Error: Need at least 2 graphs for comparison", err=True)
        sys.exit(1)

    if len(graphs) < 1:
        click.echo("Error: No graphs provided", err=True)
        sys.exit(1)

    params = _build_params(b0, bf, br, i0, i1, eps0, eps1)

    click.echo(f"Loading {len(graphs)} contact graphs...")
    try:
        loaded = [load_contact_graph(path) for path in graphs]
        ref_graph = load_contact_graph(reference) if reference else None
    except (OSError, ValueError) as e:
        click.echo(f"Error loading contact graphs: {e}", err=True)
        sys.exit(1)

    try:
        matcher = BatchMatcher(
            graphs=loaded,
            reference=ref_graph,
            params=params,
            discretization=discretization,
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if ref_graph is not None:
        click.echo(f"Reference: {ref_graph.name} ({ref_graph.n_nodes} nodes)")
        click.echo(f"\nComparing {len(loaded)} graphs to reference...")
        results = matcher.compare_to_reference(n_jobs=jobs)
    else:
        n_comparisons = len(loaded) * (len(loaded) - 1) // 2
        click.echo(f"\nPerforming {n_comparisons} pairwise comparisons...")
        results = matcher.compare_all_pairs(n_jobs=jobs)

    reporter = MatchReporter(results)

    reporter.to_csv(output)
    click.echo(f"\nResults saved to: {output}")

    if json_output:
        reporter.to_json(json_output)
        click.echo(f"JSON saved to: {json_output}")

    click.echo("\n" + reporter.summary_report())


@cli.command()
@click.argument("graph", type=click.Path(exists=True, dir_okay=False))
def info(graph):
    """Display information about a contact graph file."""
    try:
        g = load_contact_graph(graph)
    except (OSError, ValueError) as e:
        click.echo(f"Error loading contact graph: {e}", err=True)
        sys.exit(1)

    isolated = [int(i) for i in (g.degree == 0).nonzero()[0]]

    click.echo(f"\nGraph: {g.name}")
    click.echo(f"File: {graph}")
    click.echo(f"  Nodes:          {g.n_nodes}")
    click.echo(f"  Contacts:       {g.n_edges}")
    click.echo(f"  Density:        {g.density():.3f}")
    click.echo(f"  Contact order:  {g.contact_order():.3f}")
    if g.n_nodes > 0:
        click.echo(f"  Max degree:     {int(g.degree.max())}")
    if isolated:
        click.echo(f"  Isolated nodes: {format_residue_range(isolated)}")


@cli.command()
@click.argument("results_csv", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(), help="Output file")
@click.option("--format", "fmt", type=click.Choice(["text", "json"]),
              default="text", show_default=True, help="Output format")
@click.option("--min-score", type=float, help="Filter by minimum score")
@click.option("--feasible-only", is_flag=True, help="Drop infeasible matchings")
def report(results_csv, output, fmt, min_score, feasible_only):
    """Generate report from batch matching results.

    Reads a CSV file from the 'batch' command and generates
    formatted reports or applies filters.
    """
    import pandas as pd

    results = pd.read_csv(results_csv)
    reporter = MatchReporter(results)

    if min_score is not None or feasible_only:
        results = reporter.filter_results(
            min_score=min_score,
            feasible_only=feasible_only,
        )
        reporter.set_results(results)
        click.echo(f"Filtered to {len(results)} comparisons")

    if fmt == "text":
        report_text = reporter.summary_report()
        if output:
            Path(output).write_text(report_text)
            click.echo(f"Report saved to: {output}")
        else:
            click.echo(report_text)

    elif fmt == "json":
        out_path = output or "report.json"
        reporter.to_json(out_path)
        click.echo(f"JSON saved to: {out_path}")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
