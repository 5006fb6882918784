"""
Interactive menu loop for the Student Registry.

The session owns no global state: the service, the console and the input
function are passed in, so tests can drive a whole session with scripted
answers and a recording console. Invalid input is never fatal; the session
re-prompts until it gets a valid value or the user leaves (EOF / Ctrl-C).
"""

from __future__ import annotations

from typing import Callable, Optional, TypeVar

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

from student_registry import reporter
from student_registry.domain.models import Student, StudentDraft
from student_registry.domain.validation import (
    merge_update,
    parse_age,
    validate_course,
    validate_email,
    validate_name,
)
from student_registry.errors import ValidationError
from student_registry.service import StudentService
from student_registry.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

MENU = """
┌─────────────────── MAIN MENU ───────────────────┐
│  1. Add New Student                             │
│  2. View All Students                           │
│  3. Search Student by ID                        │
│  4. Search Students by Name                     │
│  5. Update Student Information                  │
│  6. Delete Student                              │
│  7. Exit Application                            │
└─────────────────────────────────────────────────┘"""

EXIT_CHOICE = 7


class Session:
    """
    One interactive user session over a `StudentService`.

    Parameters
    ----------
    service : StudentService
        Service bound to an open store.
    console : Console | None
        Output console. Defaults to a new rich Console on stdout.
    ask : Callable[[str], str] | None
        Reads one line of input for a prompt. Defaults to rich's Prompt.
        Must raise EOFError when input is exhausted.
    """

    def __init__(
        self,
        service: StudentService,
        console: Optional[Console] = None,
        ask: Optional[Callable[[str], str]] = None,
    ) -> None:
        self.service = service
        self.console = console or Console()
        self._ask = ask or self._prompt
        self._actions: dict[int, Callable[[], bool]] = {
            1: self.add_student,
            2: self.view_all_students,
            3: self.search_by_id,
            4: self.search_by_name,
            5: self.update_student,
            6: self.delete_student,
            7: self.exit_application,
        }

    def _prompt(self, text: str) -> str:
        return Prompt.ask(escape(text), console=self.console, default="", show_default=False)

    # -- input helpers -----------------------------------------------------

    def _say(self, message: str) -> None:
        self.console.print(escape(message))

    def ask_text(self, prompt: str) -> str:
        while True:
            value = self._ask(prompt).strip()
            if value:
                return value
            self._say("Input cannot be empty. Please try again.")

    def ask_valid(self, prompt: str, validator: Callable[[str], T]) -> T:
        while True:
            try:
                return validator(self.ask_text(prompt))
            except ValidationError as exc:
                self._say(exc.message)

    def ask_optional(self, prompt: str, validator: Callable[[str], T]) -> Optional[T]:
        """Blank input keeps the current value (None); anything else must validate."""
        while True:
            raw = self._ask(prompt).strip()
            if not raw:
                return None
            try:
                return validator(raw)
            except ValidationError as exc:
                self._say(exc.message)

    def ask_int(self, prompt: str) -> int:
        while True:
            try:
                return int(self.ask_text(prompt))
            except ValueError:
                self._say("Please enter a valid number.")

    def ask_menu_choice(self, low: int, high: int) -> int:
        while True:
            choice = self.ask_int("Enter your choice")
            if low <= choice <= high:
                return choice
            self._say(f"Please enter a number between {low} and {high}.")

    def confirm(self, prompt: str) -> bool:
        while True:
            answer = self.ask_text(prompt).lower()
            if answer in ("yes", "y"):
                return True
            if answer in ("no", "n"):
                return False
            self._say("Please enter 'yes' or 'no' (or 'y'/'n').")

    # -- main loop ---------------------------------------------------------

    def run(self) -> None:
        """Show the banner and serve menu actions until the user exits."""
        total = self.service.count()
        reporter.print_banner(total.count if total.ok else None, console=self.console)
        try:
            while True:
                self.console.print(MENU)
                choice = self.ask_menu_choice(1, EXIT_CHOICE)
                self.console.print()
                if not self._dispatch(choice):
                    break
        except (EOFError, KeyboardInterrupt):
            self.console.print("\nGoodbye!")

    def _dispatch(self, choice: int) -> bool:
        """Run one menu action; returns False when the session should end."""
        action = self._actions[choice]
        try:
            return action()
        except EOFError:
            raise
        except Exception as exc:  # noqa: BLE001 - one failed action must not end the session
            log.exception("Menu action failed", extra={"choice": choice})
            reporter.print_failure(f"An unexpected error occurred: {exc}", console=self.console)
            self._say("Please try again.")
            return True

    # -- menu actions ------------------------------------------------------

    def add_student(self) -> bool:
        self.console.rule("ADD NEW STUDENT")
        draft = StudentDraft(
            name=self.ask_valid("Enter student name", validate_name),
            email=self.ask_valid("Enter student email", validate_email),
            age=self.ask_valid("Enter student age", parse_age),
            course=self.ask_valid("Enter student course", validate_course),
        )
        result = self.service.add(draft)
        if result.ok and result.student is not None:
            reporter.print_success("Student added successfully!", console=self.console)
            reporter.print_student(result.student, console=self.console, title="Student Details")
        else:
            reporter.print_failure(f"Failed to add student. {result.message}", console=self.console)
        return True

    def view_all_students(self) -> bool:
        self.console.rule("VIEW ALL STUDENTS")
        result = self.service.list_all()
        if not result.ok:
            reporter.print_failure(result.message, console=self.console)
            return True
        reporter.print_students(result.students, console=self.console)
        self.console.print(f"\nTotal Students in Database: {result.count}")
        return True

    def _lookup(self, prompt: str) -> Optional[Student]:
        student_id = self.ask_int(prompt)
        result = self.service.find(student_id)
        if not result.ok:
            reporter.print_failure(result.message, console=self.console)
            return None
        return result.student

    def search_by_id(self) -> bool:
        self.console.rule("SEARCH STUDENT BY ID")
        student = self._lookup("Enter student ID")
        if student is not None:
            reporter.print_success("Student found:", console=self.console)
            reporter.print_student(student, console=self.console)
        return True

    def search_by_name(self) -> bool:
        self.console.rule("SEARCH STUDENTS BY NAME")
        pattern = self.ask_text("Enter name (or partial name) to search")
        result = self.service.search(pattern)
        if not result.ok:
            reporter.print_failure(result.message, console=self.console)
        elif not result.students:
            reporter.print_failure(
                f"No students found with name containing: {pattern}", console=self.console
            )
        else:
            reporter.print_success(
                f"Found {result.count} student(s) with name containing '{pattern}':",
                console=self.console,
            )
            reporter.print_students(result.students, console=self.console, title="Search Results")
        return True

    def update_student(self) -> bool:
        self.console.rule("UPDATE STUDENT")
        existing = self._lookup("Enter student ID to update")
        if existing is None:
            return True

        reporter.print_student(existing, console=self.console, title="Current student details")
        self._say("Enter new details (press Enter to keep current value):")

        draft = merge_update(
            existing,
            name=self.ask_optional(f"Name [{existing.name}]", validate_name),
            email=self.ask_optional(f"Email [{existing.email}]", validate_email),
            age=self.ask_optional(f"Age [{existing.age}]", parse_age),
            course=self.ask_optional(f"Course [{existing.course}]", validate_course),
        )

        if not self.confirm("Do you want to update this student? (yes/no)"):
            self._say("Update cancelled.")
            return True

        result = self.service.update(existing.id, draft)
        if result.ok and result.student is not None:
            reporter.print_success("Student updated successfully!", console=self.console)
            reporter.print_student(result.student, console=self.console, title="Updated Details")
        else:
            reporter.print_failure(
                f"Failed to update student. {result.message}", console=self.console
            )
        return True

    def delete_student(self) -> bool:
        self.console.rule("DELETE STUDENT")
        student = self._lookup("Enter student ID to delete")
        if student is None:
            return True

        reporter.print_student(student, console=self.console, title="Student to be deleted")
        self._say("WARNING: This action cannot be undone!")
        if not self.confirm("Are you sure you want to delete this student? (yes/no)"):
            self._say("Delete operation cancelled.")
            return True

        result = self.service.remove(student.id)
        if result.ok:
            reporter.print_success("Student deleted successfully!", console=self.console)
        else:
            reporter.print_failure(
                f"Failed to delete student. {result.message}", console=self.console
            )
        return True

    def exit_application(self) -> bool:
        self.console.rule("EXIT APPLICATION")
        if not self.confirm("Are you sure you want to exit? (yes/no)"):
            self._say("Exit cancelled. Returning to main menu...")
            return True
        self._say("Thank you for using Student Database Management System!")
        self._say("Goodbye!")
        return False


__all__ = ["Session"]
