from __future__ import annotations

from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from student_registry import __version__
from student_registry.domain.models import Student


def _student_table(students: Sequence[Student], title: str) -> Table:
    table = Table(title=title, box=box.ROUNDED)

    table.add_column("ID", justify="right", style="magenta", no_wrap=True)
    table.add_column("Name", style="cyan")
    table.add_column("Email", style="green")
    table.add_column("Age", justify="right", style="yellow")
    table.add_column("Course", style="blue")

    for student in students:
        table.add_row(
            str(student.id),
            student.name,
            student.email,
            str(student.age),
            escape(student.course),
        )
    return table


def print_students(
    students: Sequence[Student],
    console: Optional[Console] = None,
    title: str = "Student List",
    empty_message: str = "No students found in database.",
) -> None:
    """
    Render students as a rich table, in the order given.
    """
    console = console or Console()

    if not students:
        console.print(f"[yellow]{escape(empty_message)}[/yellow]")
        return

    console.print(_student_table(students, title))


def print_student(
    student: Student, console: Optional[Console] = None, title: str = "Student"
) -> None:
    """Render a single student as a panel."""
    console = console or Console()
    body = (
        f"[bold]ID:[/bold] {student.id}\n"
        f"[bold]Name:[/bold] {student.name}\n"
        f"[bold]Email:[/bold] {student.email}\n"
        f"[bold]Age:[/bold] {student.age}\n"
        f"[bold]Course:[/bold] {escape(student.course)}"
    )
    console.print(Panel(body, title=title, box=box.ROUNDED, expand=False))


def print_banner(total: Optional[int], console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print(
        Panel(
            f"[bold]STUDENT DATABASE MANAGEMENT SYSTEM[/bold]\nVersion {__version__}",
            box=box.DOUBLE,
            expand=False,
        )
    )
    status = "unknown" if total is None else str(total)
    console.print(f"Database Status: Connected | Total Students: {status}\n")


def print_success(message: str, console: Optional[Console] = None) -> None:
    (console or Console()).print(f"[green]✓ {escape(message)}[/green]")


def print_failure(message: str, console: Optional[Console] = None) -> None:
    (console or Console()).print(f"[red]✗ {escape(message)}[/red]")


__all__ = [
    "print_banner",
    "print_failure",
    "print_student",
    "print_students",
    "print_success",
]
