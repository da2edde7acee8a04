"""Facade used by the CLI and library callers to diff, inspect and transform reports."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

import structlog

from .adapters import PluginLoader
from .config import ConfigLoader
from .diff import DiffEngine
from .errors import DiffComparisonError, MalformedReportError
from .inspection import ErrorPolicy, InspectionEngine, InspectOptions, sort_messages
from .models import Config, DiffResult, Message, Report, Severity
from .normalization import ReportNormalizer
from .registry import Plugin, Registry, create_default_registry
from .streams import Stream, collect, from_any, map_items
from .transformers import REPORT, TransformerChain, TransformOptions

logger = structlog.get_logger(__name__)


class ReportToolkit:
    """High level entry point wiring the registry, config resolver and engines."""

    def __init__(self, registry: Registry | None = None) -> None:
        self.registry = registry if registry is not None else create_default_registry()
        self.plugin_loader = PluginLoader(self.registry)
        self.config_loader = ConfigLoader(self.registry, plugin_loader=self.plugin_loader)
        self._diff_engine = DiffEngine()
        self._inspection_engine = InspectionEngine(self.registry)

    # ------------------------------------------------------------------
    def to_report(
        self,
        value: Any,
        *,
        filepath: Optional[str] = None,
        show_secrets_unsafe: bool = False,
    ) -> Report:
        """Convert a raw report (mapping or JSON text) to a :class:`Report`."""

        normalizer = ReportNormalizer(show_secrets_unsafe=show_secrets_unsafe)
        return normalizer.normalize(value, filepath=filepath)

    def load_config(self, raw: Any) -> Config:
        return self.config_loader.load(raw)

    def use(self, plugin_id: str) -> Plugin:
        return self.plugin_loader.use(plugin_id)

    def deregister_plugins(self, plugin_ids: Iterable[str] | None = None) -> None:
        self.registry.deregister_plugins(plugin_ids)

    # ------------------------------------------------------------------
    def diff(
        self,
        report1: Any,
        report2: Any,
        *,
        filter_properties: Sequence[str] = (),
        show_secrets_unsafe: bool = False,
        best_effort: bool = False,
    ) -> list[DiffResult]:
        """Return the differences between two reports, in walk order."""

        try:
            first = self.to_report(report1, show_secrets_unsafe=show_secrets_unsafe)
            second = self.to_report(report2, show_secrets_unsafe=show_secrets_unsafe)
        except MalformedReportError as exc:
            raise DiffComparisonError(f"Cannot diff reports: {exc}") from exc

        results = self._diff_engine.diff(first, second, filter_properties)
        return collect(results, best_effort=best_effort, on_error=_log_partial("diff"))

    def inspect(
        self,
        reports: Any,
        *,
        severity: Severity | str = Severity.INFO,
        sort: bool = False,
        sort_field: str = "filename",
        sort_direction: str = "asc",
        show_secrets_unsafe: bool = False,
        rule_config: Mapping[str, Mapping[str, Any]] | None = None,
        config: Config | Any = None,
        error_policy: ErrorPolicy | str = ErrorPolicy.MESSAGE,
    ) -> list[Message]:
        """Run enabled rules over ``reports`` and return the resulting messages."""

        options = InspectOptions(
            severity=severity,
            sort=sort,
            sort_field=sort_field,
            sort_direction=sort_direction,
            rule_config=dict(rule_config or {}),
            error_policy=error_policy,
        )
        messages = self.inspect_stream(
            reports,
            config=config,
            options=options,
            show_secrets_unsafe=show_secrets_unsafe,
        ).to_list()

        if options.sort:
            messages = sort_messages(messages, options.sort_field, options.sort_direction)
        return messages

    def inspect_stream(
        self,
        reports: Any,
        *,
        config: Config | Any = None,
        options: InspectOptions | None = None,
        show_secrets_unsafe: bool = False,
    ) -> Stream[Message]:
        """Lazy variant of :meth:`inspect`, without sorting."""

        return self._inspection_engine.inspect(
            self._report_stream(reports, show_secrets_unsafe),
            self._resolve_config(config),
            options,
        )

    def transform(
        self,
        transformer_ids: str | Sequence[str],
        source: Any,
        config: Config | Any = None,
        options: TransformOptions | None = None,
        *,
        show_secrets_unsafe: bool = False,
        best_effort: bool = False,
    ) -> list[Any]:
        """Run ``source`` through the transformers named by ``transformer_ids``.

        The chain is validated before any item flows. When the last
        transformer does not produce ``options.end_type``, the default
        transformer for that type is appended.
        """

        chain = self.resolve_chain(transformer_ids, config, options)
        if chain.begin_with == REPORT:
            source = self._report_stream(source, show_secrets_unsafe)
        return collect(
            chain.execute(source),
            best_effort=best_effort,
            on_error=_log_partial("transform"),
        )

    def resolve_chain(
        self,
        transformer_ids: str | Sequence[str],
        config: Config | Any = None,
        options: TransformOptions | None = None,
    ) -> TransformerChain:
        return TransformerChain.resolve(
            self.registry, transformer_ids, self._resolve_config(config), options
        )

    # ------------------------------------------------------------------
    def _resolve_config(self, config: Config | Any) -> Config:
        if config is None:
            return Config()
        if isinstance(config, Config):
            return config
        return self.load_config(config)

    def _report_stream(self, reports: Any, show_secrets_unsafe: bool) -> Stream[Report]:
        normalizer = ReportNormalizer(show_secrets_unsafe=show_secrets_unsafe)

        def to_report(value: Any) -> Report:
            return normalizer.normalize(value, filepath=getattr(value, "filepath", None))

        return from_any(reports).pipe(map_items(to_report))


def _log_partial(operation: str) -> Callable[[Exception, list[Any]], None]:
    def on_error(exc: Exception, items: list[Any]) -> None:
        logger.warning(
            "partial_results_returned",
            operation=operation,
            error=str(exc),
            items=len(items),
        )

    return on_error


__all__ = ["ReportToolkit"]
