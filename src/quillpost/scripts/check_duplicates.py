# src/quillpost/scripts/check_duplicates.py
"""Report posts that share a slug.

Slug uniqueness is only checked at create time, so concurrent creates can
leave several posts with the same slug. Readers are served the most recently
published one; this script lists the rest and can delete them.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections import defaultdict

from quillpost.core.errors import QuillpostError
from quillpost.repositories.documents import DocumentStore
from quillpost.repositories.post_repo import PostRepository
from quillpost.schemas.post import Post
from quillpost.scripts._store import open_store
from quillpost.services.identity import DuplicateSlug, address_for, rank_by_publication

logger = logging.getLogger(__name__)


def find_duplicates(posts: list[Post]) -> list[tuple[DuplicateSlug, list[Post]]]:
    """Group ``posts`` by slug and rank each group the way readers see it."""
    by_slug: dict[str, list[Post]] = defaultdict(list)
    for post in posts:
        by_slug[post.slug].append(post)

    duplicates = []
    for slug in sorted(by_slug):
        group = by_slug[slug]
        if len(group) < 2:
            continue
        ranked = rank_by_publication(group)
        report = DuplicateSlug(
            slug=slug,
            chosen=address_for(ranked[0]),
            others=tuple(address_for(post) for post in ranked[1:]),
        )
        duplicates.append((report, ranked))
    return duplicates


def delete_losers(store: DocumentStore, report: DuplicateSlug) -> int:
    """Delete every non-authoritative post in ``report``; return how many."""
    repo = PostRepository(store)
    deleted = 0
    for address in report.others:
        try:
            repo.delete(address.id, address.partition_key)
        except QuillpostError as exc:
            logger.error("Could not delete %s (slug %r): %s", address.id, report.slug, exc.detail)
            continue
        deleted += 1
    return deleted


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Report posts sharing a slug")
    parser.add_argument(
        "--delete-losers",
        action="store_true",
        help="Delete every post except the one readers are served.",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    with open_store() as store:
        duplicates = find_duplicates(PostRepository(store).list_all())
        if not duplicates:
            print("[check_duplicates] no duplicate slugs")
            return 0

        for report, ranked in duplicates:
            chosen = ranked[0]
            print(
                f"[check_duplicates] slug {report.slug!r}: serving {chosen.id} "
                f"(status={chosen.status}, publishedAt={chosen.published_at})"
            )
            for address in report.others:
                print(f"    duplicate id={address.id} partition_key={address.partition_key}")
            if args.delete_losers:
                removed = delete_losers(store, report)
                print(f"    deleted {removed} of {len(report.others)}")
    return 0 if args.delete_losers else 1


if __name__ == "__main__":
    sys.exit(main())
