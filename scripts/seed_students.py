"""
Sample data script for the Student Registry.

Generates deterministic pseudo-random students and inserts them through the
record store, so every seeded row passes the same validation and constraints
as interactive input.
"""

from __future__ import annotations

import random
import sys
import time
from typing import List, Optional

import typer

from student_registry.config import get_settings
from student_registry.domain.models import StudentDraft
from student_registry.domain.validation import validate_draft
from student_registry.errors import ConnectionFailureError, DuplicateKeyError
from student_registry.infrastructure.db_factory import open_store
from student_registry.infrastructure.student_store import StudentStore

app = typer.Typer(help="Generate sample students and load them into Postgres.")

FIRST_NAMES = [
    "Ada", "Alan", "Grace", "Edsger", "Barbara", "Donald", "Margaret", "Niklaus",
    "Frances", "John", "Radia", "Dennis", "Hedy", "Ken", "Sophie", "Tim",
]
LAST_NAMES = [
    "Lovelace", "Turing", "Hopper", "Dijkstra", "Liskov", "Knuth", "Hamilton", "Wirth",
    "Allen", "McCarthy", "Perlman", "Ritchie", "Lamarr", "Thompson", "Wilson", "O'Brien",
]
COURSES = [
    "Mathematics", "Computer Science", "Physics", "Chemistry", "Biology",
    "Economics", "History", "Philosophy", "Mechanical Engineering", "Data Science",
]
DOMAINS = ["example.com", "uni.edu", "school.org"]


def _generate_students(count: int, seed: int) -> List[StudentDraft]:
    """Build `count` valid drafts with unique emails; same seed, same output."""
    rng = random.Random(seed)
    drafts: List[StudentDraft] = []
    for index in range(1, count + 1):
        first = rng.choice(FIRST_NAMES)
        last = rng.choice(LAST_NAMES)
        local = f"{first}.{last}".replace("'", "").lower()
        drafts.append(
            validate_draft(
                name=f"{first} {last}",
                email=f"{local}{index}@{rng.choice(DOMAINS)}",
                age=rng.randint(16, 100),
                course=rng.choice(COURSES),
            )
        )
    return drafts


def _load_students(store: StudentStore, drafts: List[StudentDraft]) -> int:
    """Insert drafts one by one; existing emails are skipped. Returns rows inserted."""
    inserted = 0
    for draft in drafts:
        try:
            store.create(draft)
        except DuplicateKeyError:
            continue
        inserted += 1
    return inserted


@app.command()
def main(
    count: int = typer.Option(
        25,
        "--count",
        "-n",
        min=1,
        help="Number of students to generate.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    dsn: Optional[str] = typer.Option(
        None,
        "--dsn",
        help="Optional DSN override for Postgres.",
    ),
) -> None:
    """
    Generate sample students and insert them into the students table.
    """
    start = time.perf_counter()
    drafts = _generate_students(count, seed)
    typer.echo(f"Generated {len(drafts)} students (seed={seed}).")

    try:
        with open_store(get_settings(), dsn=dsn) as store:
            inserted = _load_students(store, drafts)
            total = store.count()
    except ConnectionFailureError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)

    duration = time.perf_counter() - start
    typer.echo(
        f"Inserted {inserted} new students in {duration:.2f}s "
        f"({len(drafts) - inserted} skipped as duplicates). Total students: {total}."
    )


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
