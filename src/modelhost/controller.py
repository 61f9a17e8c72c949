"""Controller: one engine session around one model instance.

Usage::

    ctl = Controller("Model2")
    ctl.read_data_from("data/data1.txt").run_model().run_script("x = LL * 2")
    print(ctl.get_results_as_tsv())

Every phase returns the controller so calls can be chained.  The binding
table is re-synced from the model after construction, loading and each
run; scripts only ever touch the table.
"""

from __future__ import annotations

import time
import uuid
from pathlib import Path
from typing import Any

from modelhost.bindings import BindingTable, sync
from modelhost.errors import (
    BindingError,
    LoadError,
    ModelExecutionError,
    SessionFailedError,
)
from modelhost.loader import DataSet, apply_dataset, parse_data_file
from modelhost.logging.events import (
    BINDING_ACCESS_ERROR,
    DATA_FILE_EMPTY,
    DATA_FILE_MISSING,
    DATA_PARSE_ERROR,
    MODEL_EXECUTION_ERROR,
    SCRIPT_PARSE_ERROR,
    SCRIPT_RUNTIME_ERROR,
    EventLevel,
    EventType,
    emit,
    make_session_event,
    open_sink,
)
from modelhost.models import Model, get_model_cls
from modelhost.project import load_project_config
from modelhost.report import NumberFormat, render_report
from modelhost.script import ScriptError, ScriptParseError, evaluate


class Controller:
    """Loads a model, feeds it data, runs it and exposes its variables.

    Attributes:
        model: The model instance owned by this session.
        bindings: The shared namespace.
        dataset: The last successfully parsed data file, if any.
        session_id: Identifier used to attribute log events.
        sink: This session's event sink, or ``None`` when nothing is logged.
    """

    def __init__(
        self,
        model_name: str,
        *,
        project_dir: Path | None = None,
        config: dict[str, Any] | None = None,
    ) -> None:
        """Instantiate *model_name* and take the initial binding snapshot.

        Args:
            model_name: Registered model name or ``package.module:ClassName``.
            project_dir: Optional project root; supplies ``modelhost.yaml``.
            config: Config keys overriding the project's.

        Raises:
            ModelNotFoundError: If *model_name* does not resolve.
        """
        self.config = load_project_config(project_dir)
        if config:
            self.config.update(config)
        self.sink = open_sink(project_dir, self.config)
        self.axis_name = str(self.config["axis_name"])
        self.horizon_name = str(self.config["horizon_name"])
        self.session_id = uuid.uuid4().hex[:12]
        self.failed = False
        self.dataset: DataSet | None = None

        model_cls = get_model_cls(model_name)
        self.model_name = model_cls.model_name or model_name
        self.model: Model = model_cls()
        self.bindings = BindingTable()

        self._emit(
            EventType.session_started,
            EventLevel.info,
            f"Session started for model {self.model_name}",
        )
        self._sync()

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def read_data_from(self, fname: Path | str) -> Controller:
        """Load a data file into the model and the binding table.

        A missing file or a blank first line is logged and ignored.

        Raises:
            LoadError: If the file contains a malformed number.  The model
                keeps its previous values.
        """
        path = Path(fname)
        if not path.is_file():
            self._emit(
                EventType.data_load_skipped,
                EventLevel.warning,
                f"Data file not found: {path}",
                error_code=DATA_FILE_MISSING,
                extra={"path": str(path)},
            )
            return self

        try:
            dataset = parse_data_file(path)
        except LoadError as exc:
            self._emit(
                EventType.data_load_failed,
                EventLevel.error,
                str(exc),
                error_code=DATA_PARSE_ERROR,
                extra={"path": str(path)},
            )
            raise

        if dataset is None:
            self._emit(
                EventType.data_load_skipped,
                EventLevel.warning,
                f"Data file has no header row: {path}",
                error_code=DATA_FILE_EMPTY,
                extra={"path": str(path)},
            )
            return self

        self.dataset = dataset
        errors = apply_dataset(
            self.model,
            self.bindings,
            dataset,
            axis_name=self.axis_name,
            horizon_name=self.horizon_name,
        )
        self._log_binding_errors(errors)
        self._emit(
            EventType.data_loaded,
            EventLevel.info,
            f"Loaded {len(dataset.series)} series over {dataset.horizon} periods",
            extra={
                "path": str(path),
                "horizon": dataset.horizon,
                "series": list(dataset.series),
            },
        )
        return self

    def run_model(self) -> Controller:
        """Run the model and re-sync the binding table.

        Raises:
            ModelExecutionError: If ``run()`` raises.  The session is then
                discarded and further runs or scripts are refused.
        """
        self._check_session()
        t0 = time.monotonic()
        try:
            self.model.run()
        except Exception as exc:
            self.failed = True
            self._emit(
                EventType.model_run_failed,
                EventLevel.error,
                f"{type(exc).__name__}: {exc}",
                error_code=MODEL_EXECUTION_ERROR,
            )
            raise ModelExecutionError(self.model_name, f"{type(exc).__name__}: {exc}") from exc

        elapsed_ms = round((time.monotonic() - t0) * 1000, 2)
        self._sync()
        self._emit(
            EventType.model_run_completed,
            EventLevel.info,
            f"Model {self.model_name} completed",
            extra={"elapsed_ms": elapsed_ms},
        )
        return self

    def run_script(self, script: str) -> Controller:
        """Run an inline script against the binding table.

        Raises:
            ScriptError: On a syntax or runtime error.  Writes made before
                the failing statement are kept.
        """
        return self._run_script(script, origin="<inline>")

    def run_script_from_file(self, fname: Path | str) -> Controller:
        """Run a script read from *fname* against the binding table.

        Raises:
            FileNotFoundError: If *fname* does not exist.
            ScriptError: As for ``run_script()``.
        """
        path = Path(fname)
        return self._run_script(path.read_text(encoding="utf-8"), origin=str(path))

    def get_results_as_tsv(self) -> str:
        """Render the binding table as tab-separated text."""
        private = {decl.name for decl in self.model.bound_variables() if decl.private}
        text = render_report(
            self.bindings,
            axis_name=self.axis_name,
            horizon_name=self.horizon_name,
            private_names=private,
            number_format=NumberFormat.from_config(self.config),
        )
        self._emit(
            EventType.report_rendered,
            EventLevel.info,
            "Report rendered",
            extra={"lines": text.count("\n")},
        )
        return text

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _run_script(self, source: str, *, origin: str) -> Controller:
        self._check_session()
        before = set(self.bindings)
        try:
            evaluate(source, self.bindings)
        except ScriptError as exc:
            code = SCRIPT_PARSE_ERROR if isinstance(exc, ScriptParseError) else SCRIPT_RUNTIME_ERROR
            self._emit(
                EventType.script_failed,
                EventLevel.error,
                str(exc),
                error_code=code,
                extra={"origin": origin, "source": source},
            )
            raise
        added = [name for name in self.bindings if name not in before]
        self._emit(
            EventType.script_completed,
            EventLevel.info,
            f"Script {origin} completed",
            extra={"origin": origin, "added": added},
        )
        return self

    def _sync(self) -> None:
        self._log_binding_errors(sync(self.model, self.bindings))

    def _check_session(self) -> None:
        if self.failed:
            raise SessionFailedError(self.model_name)

    def _log_binding_errors(self, errors: list[BindingError]) -> None:
        for exc in errors:
            self._emit(
                EventType.binding_error,
                EventLevel.warning,
                str(exc),
                error_code=BINDING_ACCESS_ERROR,
                extra={"variable": exc.name},
            )

    def _emit(
        self,
        event_type: EventType,
        level: EventLevel,
        message: str,
        *,
        error_code: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        emit(
            make_session_event(
                event_type,
                level,
                message,
                session_id=self.session_id,
                model_name=self.model_name,
                error_code=error_code,
                extra=extra,
            ),
            sink=self.sink,
            session_id=self.session_id,
        )
