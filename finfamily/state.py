"""
View State

DESIGN DECISION: Everything the UI needs to remember between reruns
(active module, selected month, the record form) lives in one immutable
ViewState. It only changes through the named transitions below, each of
which returns a new state. The Streamlit app keeps exactly one ViewState
in its session and replaces it after every transition.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from finfamily.models.form import FormFields, ValidationResult
from finfamily.models.record import ModuleId, Month, Record, RecordDraft
from finfamily.validation import RecordValidator


class InvalidTransition(Exception):
    """A transition was attempted from a state that doesn't allow it."""
    pass


class FormSubmission(BaseModel):
    """
    What a form submit produced.

    At most one of `draft` (create) and `edited` (update) is set; neither
    is set when validation failed.
    """

    model_config = ConfigDict(frozen=True)

    draft: Optional[RecordDraft] = None
    edited: Optional[Record] = None
    validation: ValidationResult = Field(default_factory=ValidationResult)

    @property
    def accepted(self) -> bool:
        return self.draft is not None or self.edited is not None


class ViewState(BaseModel):
    """Immutable UI state. Use the transition methods to change it."""

    model_config = ConfigDict(frozen=True)

    active_module: Optional[ModuleId] = None
    month: Month = Field(default_factory=Month.current)
    form_open: bool = False
    editing: Optional[Record] = None
    form: FormFields = Field(default_factory=FormFields)

    @property
    def on_dashboard(self) -> bool:
        return self.active_module is None

    def _require_module(self, transition: str) -> ModuleId:
        if self.active_module is None:
            raise InvalidTransition(f"{transition} needs an active module")
        return self.active_module

    # --- navigation ---------------------------------------------------------

    def select_module(self, module_id: ModuleId) -> "ViewState":
        """Open a module's detail view on the current month."""
        return ViewState(active_module=ModuleId(module_id), month=Month.current())

    def back_to_dashboard(self) -> "ViewState":
        return ViewState(month=self.month)

    def previous_month(self) -> "ViewState":
        return self.model_copy(update={"month": self.month.previous()})

    def next_month(self) -> "ViewState":
        return self.model_copy(update={"month": self.month.next()})

    # --- record form --------------------------------------------------------

    def open_form(self, editing: Optional[Record] = None) -> "ViewState":
        """
        Open the record form, prefilled from `editing` or blank
        (expense, dated today).
        """
        self._require_module("OpenForm")
        form = FormFields.from_record(editing) if editing else FormFields()
        return self.model_copy(update={
            "form_open": True,
            "editing": editing,
            "form": form,
        })

    def update_form(self, **fields) -> "ViewState":
        """Replace some of the form's raw values."""
        if not self.form_open:
            raise InvalidTransition("UpdateForm needs an open form")
        return self.model_copy(update={"form": self.form.model_copy(update=fields)})

    def close_form(self) -> "ViewState":
        return self.model_copy(update={
            "form_open": False,
            "editing": None,
            "form": FormFields(),
        })

    def submit_form(
        self,
        validator: Optional[RecordValidator] = None,
    ) -> tuple["ViewState", Optional[FormSubmission]]:
        """
        Submit the record form.

        Returns:
            (new_state, submission). A blank title or amount is a no-op:
            the state is unchanged and the submission is None. A form that
            fails validation stays open and the submission carries the
            issues. Otherwise the form closes and the submission carries
            either a new draft or the edited record.
        """
        module_id = self._require_module("SubmitForm")
        if not self.form_open:
            raise InvalidTransition("SubmitForm needs an open form")

        if self.form.is_blank:
            return self, None

        validator = validator or RecordValidator()
        validation = validator.validate(self.form)
        if validation.has_errors:
            return self, FormSubmission(validation=validation)

        draft = validator.to_draft(self.form, module_id)
        if self.editing is not None:
            edited = self.editing.with_changes(**draft.model_dump(
                include={"module_id", "title", "amount", "date", "kind"}
            ))
            submission = FormSubmission(edited=edited, validation=validation)
        else:
            submission = FormSubmission(draft=draft, validation=validation)

        return self.close_form(), submission
