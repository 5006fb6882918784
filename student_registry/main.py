from __future__ import annotations

import sys
from contextlib import ExitStack, contextmanager
from typing import Generator, Optional

import typer
from rich.console import Console

from student_registry import reporter
from student_registry.config import get_settings
from student_registry.domain.validation import merge_update, validate_draft
from student_registry.errors import ConnectionFailureError, StoreError, ValidationError
from student_registry.infrastructure.db_factory import open_store
from student_registry.service import OperationResult, StudentService
from student_registry.session import Session
from student_registry.utils.logging import configure_logging

app = typer.Typer(help="Student Registry CLI.")

EXIT_FAILURE = 1
EXIT_INVALID_INPUT = 2


@contextmanager
def _service(ctx: typer.Context) -> Generator[StudentService, None, None]:
    """
    Open the store for one command. Connection or schema failure aborts
    before any operation runs; errors raised by the command itself pass
    through untouched.
    """
    dsn = (ctx.obj or {}).get("dsn")
    with ExitStack() as stack:
        try:
            store = stack.enter_context(open_store(get_settings(), dsn=dsn))
        except ConnectionFailureError as exc:
            typer.echo(f"Failed to establish database connection: {exc}", err=True)
            raise typer.Exit(code=EXIT_FAILURE)
        except StoreError as exc:
            typer.echo(f"Failed to prepare the students table: {exc}", err=True)
            raise typer.Exit(code=EXIT_FAILURE)
        yield StudentService(store)


def _fail(result: OperationResult, console: Console) -> None:
    reporter.print_failure(result.message, console=console)
    raise typer.Exit(code=EXIT_FAILURE)


def _invalid(exc: ValidationError) -> None:
    typer.echo(f"Invalid {exc.field or 'input'}: {exc.message}", err=True)
    raise typer.Exit(code=EXIT_INVALID_INPUT)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    dsn: Optional[str] = typer.Option(
        None,
        "--dsn",
        help="Optional DSN override for Postgres (default built from settings).",
    ),
) -> None:
    """
    Manage student records. Without a command, starts the interactive shell.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    ctx.obj = {"dsn": dsn}
    if ctx.invoked_subcommand is None:
        ctx.invoke(shell, ctx)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"table={settings.db_table} connect_timeout={settings.db_connect_timeout}s "
        f"attempts={settings.db_connect_attempts} env={settings.app_env}"
    )


@app.command("init-db")
def init_db(ctx: typer.Context) -> None:
    """
    Create the students table if it does not exist.
    """
    with _service(ctx) as service:
        typer.echo(f"Table '{service.store.table}' is ready.")


@app.command()
def shell(ctx: typer.Context) -> None:
    """
    Start the interactive menu.
    """
    with _service(ctx) as service:
        Session(service).run()


@app.command()
def add(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", "-n", help="Full name."),
    email: str = typer.Option(..., "--email", "-e", help="Email address (unique)."),
    age: int = typer.Option(..., "--age", "-a", help="Age, 16 to 100."),
    course: str = typer.Option(..., "--course", "-c", help="Course name."),
) -> None:
    """
    Add a new student.
    """
    try:
        draft = validate_draft(name, email, age, course)
    except ValidationError as exc:
        _invalid(exc)
        return

    console = Console()
    with _service(ctx) as service:
        result = service.add(draft)
    if not result.ok or result.student is None:
        _fail(result, console)
        return
    reporter.print_success("Student added successfully!", console=console)
    reporter.print_student(result.student, console=console, title="Student Details")


@app.command("list")
def list_students(ctx: typer.Context) -> None:
    """
    List all students ordered by id.
    """
    console = Console()
    with _service(ctx) as service:
        result = service.list_all()
    if not result.ok:
        _fail(result, console)
        return
    reporter.print_students(result.students, console=console)
    console.print(f"Total Students in Database: {result.count}")


@app.command()
def show(ctx: typer.Context, student_id: int = typer.Argument(..., help="Student id.")) -> None:
    """
    Show one student by id.
    """
    console = Console()
    with _service(ctx) as service:
        result = service.find(student_id)
    if not result.ok or result.student is None:
        _fail(result, console)
        return
    reporter.print_student(result.student, console=console)


@app.command()
def search(ctx: typer.Context, pattern: str = typer.Argument(..., help="Name substring.")) -> None:
    """
    Search students by (partial, case-insensitive) name.
    """
    console = Console()
    with _service(ctx) as service:
        result = service.search(pattern)
    if not result.ok:
        _fail(result, console)
        return
    reporter.print_students(
        result.students,
        console=console,
        title="Search Results",
        empty_message=f"No students found with name containing: {pattern}",
    )


@app.command()
def update(
    ctx: typer.Context,
    student_id: int = typer.Argument(..., help="Student id."),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="New name."),
    email: Optional[str] = typer.Option(None, "--email", "-e", help="New email."),
    age: Optional[int] = typer.Option(None, "--age", "-a", help="New age."),
    course: Optional[str] = typer.Option(None, "--course", "-c", help="New course."),
) -> None:
    """
    Update a student; omitted fields keep their current value.
    """
    console = Console()
    with _service(ctx) as service:
        found = service.find(student_id)
        if not found.ok or found.student is None:
            _fail(found, console)
            return
        try:
            draft = merge_update(found.student, name=name, email=email, age=age, course=course)
        except ValidationError as exc:
            _invalid(exc)
            return
        result = service.update(student_id, draft)
    if not result.ok or result.student is None:
        _fail(result, console)
        return
    reporter.print_success("Student updated successfully!", console=console)
    reporter.print_student(result.student, console=console, title="Updated Details")


@app.command()
def delete(
    ctx: typer.Context,
    student_id: int = typer.Argument(..., help="Student id."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """
    Delete a student permanently.
    """
    if not yes:
        typer.confirm(f"Delete student {student_id}? This action cannot be undone", abort=True)
    console = Console()
    with _service(ctx) as service:
        result = service.remove(student_id)
    if not result.ok:
        _fail(result, console)
        return
    reporter.print_success("Student deleted successfully!", console=console)


@app.command()
def count(ctx: typer.Context) -> None:
    """
    Print the number of students.
    """
    console = Console()
    with _service(ctx) as service:
        result = service.count()
    if not result.ok:
        _fail(result, console)
        return
    typer.echo(str(result.count))


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
