import warnings
from types import MappingProxyType
from typing import Any, Callable, Optional

import structlog

Extractor = Callable[[Any], dict[str, Any]]

LEVELS_REQUIRING_REASON = frozenset({"warning", "error"})


def attribute_extractor(**fields: str) -> Extractor:
    """
    Build an extractor which copies attributes off a context object, e.g.
    ``attribute_extractor(chapter_name="name")`` turns ``chapter=ref`` into
    ``chapter_name=ref.name``. Missing attributes become None.
    """

    def extract(obj):
        return {field: getattr(obj, attr, None) for field, attr in fields.items()}

    return extract


# Source descriptors (CategoryRef, ChapterRef...) and the stored models share
# ``name``/``link``, so one extractor covers both. Descriptors have no ``pk``.
DEFAULT_EXTRACTORS = MappingProxyType(
    {
        "category": attribute_extractor(category_name="name", category_id="pk"),
        "chapter": attribute_extractor(
            chapter_name="name", chapter_id="pk", chapter_link="link"
        ),
        "page": attribute_extractor(page_no="page_no", page_link="link"),
        "lease": attribute_extractor(
            lease_category_name="category_name", lease_id="pk"
        ),
    }
)


class HarvestLogger:
    """
    Thin wrapper over a structlog logger for the ingestion pipeline.

    Every entry needs a message and an ``event_code``; warnings and errors
    also need a ``reason`` and a ``reason_code``. Pipeline objects can be
    passed by role (``category=``, ``chapter=``, ``page=``, ``lease=``) and
    are flattened into plain fields such as ``category_name`` or ``page_no``
    before the entry is emitted. Explicit keyword values win over flattened
    ones and None values are dropped.

        structured_logger = HarvestLogger.get_logger(__name__)
        structured_logger.warning(
            "Category is already being processed.",
            event_code="category_lease_conflict",
            reason="Another run holds the processing lease.",
            reason_code="lease_held",
            category=category_ref,
        )
    """

    def __init__(self, logger, context: Optional[dict[str, Any]] = None):
        self._logger = logger
        self._context = dict(context or {})
        self._extractors = dict(DEFAULT_EXTRACTORS)

    @classmethod
    def get_logger(cls, name: str) -> "HarvestLogger":
        # Namespaced so the LOGGING config can route structured output apart
        return cls(structlog.get_logger(f"structlog.{name}"))

    def register_extractor(self, key: str, extractor: Extractor) -> None:
        """
        Add or replace how objects passed as ``key`` are flattened, for this
        logger instance only
        """
        if key in DEFAULT_EXTRACTORS:
            warnings.warn(
                f"Extractor for '{key}' replaces the default one on this logger.",
                UserWarning,
                stacklevel=2,
            )
        self._extractors[key] = extractor

    def unregister_extractor(self, key: str) -> None:
        self._extractors.pop(key, None)

    def bind(self, **context: Any) -> "HarvestLogger":
        """
        Return a logger which adds ``context`` to every entry
        """
        bound = HarvestLogger(self._logger, context={**self._context, **context})
        bound._extractors = dict(self._extractors)
        return bound

    def _flatten(self, context: dict[str, Any]) -> dict[str, Any]:
        merged = {**self._context, **context}

        fields: dict[str, Any] = {}
        for role, extractor in self._extractors.items():
            obj = merged.pop(role, None)
            if obj:
                fields.update(extractor(obj))

        # Keys passed or bound explicitly override flattened ones
        fields.update(merged)
        return {key: value for key, value in fields.items() if value is not None}

    def log(
        self,
        level: str,
        message: str,
        *,
        event_code: str,
        reason: Optional[str] = None,
        reason_code: Optional[str] = None,
        **context: Any,
    ) -> None:
        if not message:
            raise ValueError("Log message is required.")
        if not event_code:
            raise ValueError("Structured logs must include an 'event_code' field.")
        if level in LEVELS_REQUIRING_REASON and not (reason and reason_code):
            raise ValueError(
                f"{level.capitalize()} entries need both 'reason' and 'reason_code'."
            )

        entry = {"event_code": event_code}
        if reason:
            entry["reason"] = reason
        if reason_code:
            entry["reason_code"] = reason_code
        entry.update(self._flatten(context))

        getattr(self._logger, level)(message, **entry)

    def debug(self, message: str, *, event_code: str, **context):
        self.log("debug", message, event_code=event_code, **context)

    def info(self, message: str, *, event_code: str, **context):
        self.log("info", message, event_code=event_code, **context)

    def warning(
        self, message: str, *, event_code: str, reason: str, reason_code: str, **context
    ):
        self.log(
            "warning",
            message,
            event_code=event_code,
            reason=reason,
            reason_code=reason_code,
            **context,
        )

    def error(
        self, message: str, *, event_code: str, reason: str, reason_code: str, **context
    ):
        self.log(
            "error",
            message,
            event_code=event_code,
            reason=reason,
            reason_code=reason_code,
            **context,
        )
