import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

import typer
from InquirerPy import inquirer

from reports import PlotSaveConfig, plot_observed_expected, plot_stats_table, sequence_summary_frame
from shuffler.aggregation.batch import ANALYSES, run_batch
from shuffler.config import BATCH_LIMIT, COLLECTIONS, DEFAULT_STORE_ROOT
from shuffler.stats import to_dict
from shuffler.store import DistributionStore, load_matches, open_store
from shuffler.views import TRANSFORMS, StatsView

app = typer.Typer()


def _open_stores(store_root: Path, kinds: List[str]) -> Dict[str, DistributionStore]:
    stores: Dict[str, DistributionStore] = {}
    for kind in kinds:
        if kind not in COLLECTIONS:
            raise typer.BadParameter(f"Unknown kind '{kind}'. Choose from: {', '.join(COLLECTIONS)}.")
        stores[kind] = open_store(store_root, kind, COLLECTIONS[kind]["collection"])
    return stores


def _load_view(store_root: Path, view: str) -> StatsView:
    try:
        kind, transform = TRANSFORMS[view]
    except KeyError as exc:
        raise typer.BadParameter(f"Unknown view '{view}'. Choose from: {', '.join(TRANSFORMS)}.") from exc
    store = _open_stores(store_root, [kind])[kind]
    try:
        return transform(store.records())
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _choose(message: str, options: List[str], given: Optional[str]) -> str:
    if given is not None:
        if given not in options:
            raise typer.BadParameter(f"'{given}' is not available for {message}. Choose from: {', '.join(options)}.")
        return given
    if not options:
        raise typer.BadParameter(f"No data recorded for {message}.")
    if len(options) == 1:
        return options[0]
    return inquirer.select(message=f"Select {message}:", choices=options).execute()


@app.command()
def aggregate(
    matches: Path = typer.Option(
        ...,
        "--matches",
        exists=True,
        dir_okay=False,
        help="JSON-lines dump of match records to fold into the stores.",
    ),
    store_root: Path = typer.Option(
        DEFAULT_STORE_ROOT,
        "--store-root",
        file_okay=False,
        dir_okay=True,
        writable=True,
        help="Directory holding one JSON document per collection.",
    ),
    kinds: List[str] = typer.Option(
        list(COLLECTIONS),
        "--kind",
        help="Collections to aggregate (lands, hands, cards, positions).",
        show_default=True,
    ),
    limit: int = typer.Option(BATCH_LIMIT, "--limit", help="Maximum matches folded per collection and run."),
) -> None:
    """
    Fold matches newer than each store's high-water mark into the accumulated distributions.
    """
    try:
        records = list(load_matches(matches))
    except (TypeError, ValueError) as exc:
        raise typer.BadParameter(str(exc)) from exc
    print(f"[aggregate] Loaded {len(records)} matches from {matches}")

    stores = _open_stores(store_root, kinds)
    now = datetime.now(timezone.utc)
    for kind, store in stores.items():
        report = run_batch(records, store, ANALYSES[kind], now=now, limit=limit)
        print(
            f"[aggregate] {report.kind}: {report.matches_seen} matches, "
            f"{report.samples_counted} samples, {report.records_written} records written"
        )


@app.command()
def export(
    view: str = typer.Option("library", "--view", help=f"Statistics view ({', '.join(TRANSFORMS)})."),
    store_root: Path = typer.Option(DEFAULT_STORE_ROOT, "--store-root", file_okay=False, dir_okay=True),
    output: Path = typer.Option(..., "--output", dir_okay=False, help="JSON file to write the scored tree to."),
) -> None:
    """
    Write the scored statistics tree of one view as JSON.
    """
    stats_view = _load_view(store_root, view)
    payload = {
        "date": stats_view.date.isoformat() if stats_view.date else None,
        "selectors": list(stats_view.selectors),
        "stats": to_dict(stats_view.tree),
    }
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    print(f"[report] Wrote {view} statistics to {output}")


@app.command()
def report(
    view: str = typer.Option("library", "--view", help=f"Statistics view ({', '.join(TRANSFORMS)})."),
    store_root: Path = typer.Option(DEFAULT_STORE_ROOT, "--store-root", file_okay=False, dir_okay=True),
    keys: List[str] = typer.Option(
        [],
        "--key",
        help="Selector values in order (e.g. deck size, lands, best-of); missing ones are prompted for.",
    ),
    shuffling: Optional[str] = typer.Option(None, "--shuffling", help="standard or smoothed."),
    population: Optional[int] = typer.Option(None, "--population", help="Table column to chart."),
    hits: Optional[int] = typer.Option(None, "--hits", help="Table row to chart."),
    index: int = typer.Option(0, "--index", help="Sequence (position or mulligan) to chart."),
    extrapolated: bool = typer.Option(True, help="Chart extrapolated counts where available."),
    plots_root: Optional[Path] = typer.Option(
        None,
        "--plots-root",
        help="Directory where plots should be saved (subfolders are created automatically).",
    ),
    plots_tag: Optional[str] = typer.Option(
        None,
        "--plots-tag",
        help="Folder suffix for this run (defaults to timestamp).",
    ),
    save_static: bool = typer.Option(True, help="Write static PNG snapshots when saving plots."),
    save_html: bool = typer.Option(True, help="Write interactive HTML plots when saving."),
) -> None:
    """
    Render the significance table of one view and, optionally, the chart of one bucket.
    """
    stats_view = _load_view(store_root, view)
    if len(keys) > len(stats_view.selectors):
        raise typer.BadParameter(f"'{view}' takes at most {len(stats_view.selectors)} --key values.")

    choices: List[str] = []
    for position, selector in enumerate(stats_view.selectors):
        given = keys[position] if position < len(keys) else None
        choices.append(_choose(selector.replace("_", " "), stats_view.options(choices), given))

    stats = stats_view.select(choices)
    if stats is None:
        raise typer.BadParameter(f"No statistics recorded for {view} {'/'.join(choices)}.")
    shuffling = _choose("shuffling", list(stats.tables), shuffling)

    save_config: Optional[PlotSaveConfig] = None
    if plots_root:
        tag = plots_tag or datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        base_dir = plots_root / view
        save_config = PlotSaveConfig(base_dir=base_dir, run_tag=tag, save_static=save_static, save_html=save_html)
        print(f"[plots] Saving figures under {base_dir / tag}")

    slug = "-".join([view, *choices, shuffling])
    heading = " ".join([view, " / ".join(choices)]).strip()
    title = f"{heading} ({shuffling}, {stats.games.get(shuffling, 0)} games)"
    frame = plot_stats_table(
        stats,
        shuffling,
        view,
        title,
        save_to=save_config.for_plot(slug) if save_config else None,
    )
    print(f"[report] {len(frame)} buckets in {title}")

    if population is None or hits is None:
        return
    bucket = (stats.table(shuffling) or {}).get(population, {}).get(hits)
    if bucket is None:
        raise typer.BadParameter(f"No bucket for population {population} and hits {hits}.")
    summary = sequence_summary_frame(bucket, extrapolated=extrapolated)
    print(summary.to_string(index=False))
    try:
        plot_observed_expected(
            bucket,
            population,
            hits,
            index,
            stats_view.sample_size_for,
            extrapolated=extrapolated,
            title=f"{title}: {population}/{hits} #{index}",
            save_to=save_config.for_plot(f"{slug}-{population}-{hits}-{index}") if save_config else None,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


if __name__ == "__main__":
    app()
