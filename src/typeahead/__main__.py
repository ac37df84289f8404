from __future__ import annotations
import argparse, json, sys
from typing import Iterable, List, Tuple

from .engine import Engine
from .models import ResultBatch
from .scheduler import VirtualClock
from . import config as CFG


def parse_timeline(lines: Iterable[str]) -> List[Tuple[int, str]]:
    """
    Parse a typing timeline: one '<ms>\\t<text>' per line, ms measured from the start.
    Blank lines and '#' comments are skipped; a line with no tab means empty text.
    """
    out: List[Tuple[int, str]] = []
    last = 0
    for n, raw in enumerate(lines, 1):
        line = raw.rstrip("\r\n")
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        ms_s, _, text = line.partition("\t")
        try:
            ms = int(ms_s.strip())
        except ValueError:
            raise ValueError(f"line {n}: expected '<ms>\\t<text>', got {line!r}") from None
        if ms < last:
            raise ValueError(f"line {n}: timestamps must not go backwards ({ms} < {last})")
        last = ms
        out.append((ms, text))
    return out


def replay(eng: Engine, clock: VirtualClock, timeline: List[Tuple[int, str]]) -> None:
    """Feed a timeline through the debounced pipeline, then let the last window expire."""
    for ms, text in timeline:
        clock.advance(ms - clock.now)
        eng.on_text_changed(text)
    clock.run_all()


def _print_titles(titles: List[str], as_json: bool) -> None:
    if as_json:
        print(json.dumps(titles, ensure_ascii=False, indent=2))
        return
    if not titles:
        print("(no matches)"); return
    for i, t in enumerate(titles, 1):
        print(f"{i:<3} {t}")


def _print_batch(batch: ResultBatch, now_ms: int, as_json: bool) -> None:
    if as_json:
        row = batch.to_dict(); row["at_ms"] = now_ms
        print(json.dumps(row, ensure_ascii=False))
        return
    print(f"[{now_ms:>6} ms] #{batch.seq} {batch.query!r} -> {len(batch.titles)} titles")
    for t in batch.titles:
        print(f"    {t}")


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Type-ahead movie search")
    p.add_argument("--catalog", default=None, help="Catalog JSON (default: bundled movies.json)")
    p.add_argument("--q", default=None, help="Single query to run once")
    p.add_argument("--repl", action="store_true", help="Interactive loop")
    p.add_argument("--replay", default=None, metavar="FILE",
                   help="Simulate a typing timeline ('<ms>\\t<text>' per line, '-' for stdin)")
    p.add_argument("--delay-ms", type=int, default=CFG.DEBOUNCE_MS, help="Quiescence window")
    p.add_argument("--empty-shows-none", action="store_true", help="Empty query returns nothing")
    p.add_argument("--json", action="store_true", help="Emit JSON")
    p.add_argument("--verbose", action="store_true")

    args = p.parse_args(argv)
    if args.delay_ms < 0:
        p.error("--delay-ms must be >= 0")

    clock = VirtualClock()
    eng = Engine(clock, delay_ms=args.delay_ms, empty_shows_all=not args.empty_shows_none)
    try:
        n = eng.load(args.catalog, verbose=args.verbose)
        if args.verbose:
            print(f"[ready] catalog entries={n}", file=sys.stderr)

        if args.replay:
            eng.subscribe(lambda b: _print_batch(b, clock.now, args.json))
            if args.replay == "-":
                timeline = parse_timeline(sys.stdin)
            else:
                with open(args.replay, "r", encoding="utf-8") as f:
                    timeline = parse_timeline(f)
            replay(eng, clock, timeline)

        if args.q is not None:
            _print_titles(eng.search(args.q), args.json)

        if args.repl:
            print("Type a query (Ctrl-D to exit).")
            while True:
                try:
                    q = input("> ")
                except (EOFError, KeyboardInterrupt):
                    break
                _print_titles(eng.search(q), args.json)

        return 0
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    finally:
        eng.shutdown()


if __name__ == "__main__":
    raise SystemExit(main())
