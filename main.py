"""CLI entrypoint for the research paper bookshelf."""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

from bookshelf import Bookshelf
from citations import CITATION_STYLES, format_citation
from errors import IngestionError
from ingestion import PaperIngestor
from models import Paper
from taxonomy import compute_sub_topic_counts, compute_topic_counts

EXIT_DUPLICATE = 1
EXIT_FAILURE = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Personal bookshelf for research papers")
    parser.add_argument("--library", default=None, help="Path to the bookshelf JSON file (default: $BOOKSHELF_PATH)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Analyze a paper and add it to the bookshelf")
    source = add.add_mutually_exclusive_group(required=True)
    source.add_argument("--url", help="Paper URL")
    source.add_argument("--doi", help="DOI, with or without a doi.org prefix")
    source.add_argument("--pdf", help="Path to a PDF file")

    list_cmd = sub.add_parser("list", help="List papers, newest first")
    list_cmd.add_argument("--topic", default=None)
    list_cmd.add_argument("--sub-topic", default=None)
    list_cmd.add_argument("--tag", default=None, help="Show every paper with this tag, across topics")
    list_cmd.add_argument("--search", default="", help="Match title, author, tag, topic or sub-topic")

    topics = sub.add_parser("topics", help="Show topic counts (and sub-topics of --topic)")
    topics.add_argument("--topic", default=None)

    edit = sub.add_parser("edit", help="Change a paper's topic, sub-topic and tags")
    edit.add_argument("paper_id")
    edit.add_argument("--topic", required=True)
    edit.add_argument("--sub-topic", default=None)
    edit.add_argument("--tag", action="append", default=[], dest="tags", help="Repeat for several tags")

    delete = sub.add_parser("delete", help="Remove a paper")
    delete.add_argument("paper_id")

    cite = sub.add_parser("cite", help="Print a citation for a paper")
    cite.add_argument("paper_id")
    cite.add_argument("--style", default="APA", type=_citation_style, choices=CITATION_STYLES)

    return parser.parse_args(argv)


def _citation_style(value: str) -> str:
    """Map any spelling of a style name onto its canonical form."""
    for style in CITATION_STYLES:
        if style.lower() == value.strip().lower():
            return style
    return value


def format_paper(paper: Paper) -> str:
    classification = paper.topic if not paper.sub_topic else f"{paper.topic} / {paper.sub_topic}"
    lines = [f"[{paper.id}] {paper.title}", f"    {classification}"]
    if paper.authors:
        lines.append(f"    {_display_authors(paper.authors)}")
    venue = ", ".join(part for part in (paper.journal, paper.publish_date) if part)
    if venue:
        lines.append(f"    {venue}")
    if paper.tags:
        lines.append("    " + " ".join(f"#{tag}" for tag in paper.tags))
    lines.append(f"    {paper.url}")
    return "\n".join(lines)


def _display_authors(authors: list[str]) -> str:
    if len(authors) <= 5:
        return ", ".join(authors)
    return f"{', '.join(authors[:3])}, ..., {authors[-1]}"


def cmd_add(shelf: Bookshelf, args: argparse.Namespace) -> int:
    ingestor = PaperIngestor(shelf)
    try:
        if args.url:
            paper = ingestor.add_from_url(args.url)
        elif args.doi:
            paper = ingestor.add_from_doi(args.doi)
        else:
            paper = ingestor.add_from_pdf_path(args.pdf)
    except IngestionError as exc:
        if exc.is_duplicate:
            print(f"Skipped: {exc.message}")
            return EXIT_DUPLICATE
        print(f"Error ({exc.kind}): {exc.message}", file=sys.stderr)
        return EXIT_FAILURE

    print(format_paper(paper))
    return 0


def cmd_list(shelf: Bookshelf, args: argparse.Namespace) -> int:
    try:
        if args.tag:
            shelf.select_tag(args.tag)
        elif args.topic:
            shelf.select_topic(args.topic)
        if args.sub_topic:
            shelf.select_sub_topic(args.sub_topic)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    shelf.set_search(args.search)

    view = shelf.view()
    if not view.papers:
        if view.total == 0:
            print("Your bookshelf is empty. Add a research paper URL to get started.")
        else:
            print("No papers found. Try adjusting your search or filters.")
        return 0

    for paper in view.papers:
        print(format_paper(paper))
    print(f"\n{len(view.papers)} of {view.total} papers")
    return 0


def cmd_topics(shelf: Bookshelf, args: argparse.Namespace) -> int:
    papers = shelf.snapshot()
    print(f"All papers ({len(papers)})")
    sub_counts = compute_sub_topic_counts(papers, args.topic)
    for topic, count in compute_topic_counts(papers).items():
        print(f"  {topic} ({count})")
        if topic == args.topic:
            for sub_topic, sub_count in sub_counts.items():
                print(f"      {sub_topic} ({sub_count})")
    return 0


def cmd_edit(shelf: Bookshelf, args: argparse.Namespace) -> int:
    try:
        paper = shelf.update_metadata(args.paper_id, args.topic, args.sub_topic, args.tags)
    except KeyError:
        print(f"No paper with id {args.paper_id}", file=sys.stderr)
        return EXIT_FAILURE
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    print(format_paper(paper))
    return 0


def cmd_delete(shelf: Bookshelf, args: argparse.Namespace) -> int:
    try:
        paper = shelf.delete_paper(args.paper_id)
    except KeyError:
        print(f"No paper with id {args.paper_id}", file=sys.stderr)
        return EXIT_FAILURE
    print(f"Deleted: {paper.title}")
    return 0


def cmd_cite(shelf: Bookshelf, args: argparse.Namespace) -> int:
    try:
        paper = shelf.get_paper(args.paper_id)
    except KeyError:
        print(f"No paper with id {args.paper_id}", file=sys.stderr)
        return EXIT_FAILURE
    print(format_citation(paper, args.style))
    return 0


COMMANDS = {
    "add": cmd_add,
    "list": cmd_list,
    "topics": cmd_topics,
    "edit": cmd_edit,
    "delete": cmd_delete,
    "cite": cmd_cite,
}


def main(argv: list[str] | None = None) -> int:
    """Initialize config and run one command."""
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    shelf = Bookshelf.open(args.library)
    try:
        return COMMANDS[args.command](shelf, args)
    except OSError as exc:
        print(f"Error: could not save the bookshelf: {exc}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
