"""
Filter sinks - where filter events are delivered.

A sink receives the rendered messages for one FilterSet. Messages are
checked against the filter event schema before delivery; a sink that
cannot deliver raises DeliveryError, which apply_filters reports as a
DELIVERY_FAILURE result. Delivery is never retried.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, TextIO

import jsonschema

from .events import build_events
from .models import FailureKind, FilterError, FilterSet

logger = logging.getLogger(__name__)

DELIVERY_FAILURE_MESSAGE = "Failed to set filters."


class DeliveryError(Exception):
    """Raised when a sink cannot deliver filter messages."""


@dataclass
class ApplyResult:
    """Outcome of applying one FilterSet to a sink."""
    success: bool
    applied_count: int = 0
    message: str = ""
    error: Optional[FilterError] = None
    messages: list[dict] = field(default_factory=list)


def load_schema(schema_name: str) -> dict:
    """Load a JSON schema from the schemas directory."""
    schema_path = Path(__file__).parent.parent / "schemas" / f"{schema_name}.schema.json"
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema not found: {schema_path}")

    with open(schema_path) as f:
        return json.load(f)


class FilterSink(ABC):
    """Abstract base class for filter event receivers."""

    def __init__(self, schema: Optional[dict] = None):
        self.schema = schema or load_schema("filter_event")

    def send(self, messages: list[dict]) -> None:
        """Validate then deliver a batch of messages.

        Raises:
            DeliveryError: If a message is malformed or delivery fails
        """
        for message in messages:
            try:
                jsonschema.validate(instance=message, schema=self.schema)
            except jsonschema.ValidationError as e:
                raise DeliveryError(f"Invalid filter message {message.get('type')}: {e.message}") from e
        self.deliver(messages)

    @abstractmethod
    def deliver(self, messages: list[dict]) -> None:
        """Deliver validated messages, in order."""
        pass


class JsonLinesSink(FilterSink):
    """Writes one JSON message per line to a text stream."""

    def __init__(self, stream: TextIO, schema: Optional[dict] = None):
        super().__init__(schema)
        self.stream = stream

    def deliver(self, messages: list[dict]) -> None:
        try:
            for message in messages:
                self.stream.write(json.dumps(message, ensure_ascii=False) + "\n")
            self.stream.flush()
        except (OSError, ValueError) as e:
            raise DeliveryError(f"Could not write filter messages: {e}") from e


class RecordingSink(FilterSink):
    """Keeps delivered messages in memory. For tests and dry runs."""

    def __init__(self, fail_with: Optional[str] = None, schema: Optional[dict] = None):
        """
        Args:
            fail_with: If set, every delivery raises DeliveryError with this text
        """
        super().__init__(schema)
        self.fail_with = fail_with
        self.delivered: list[dict] = []

    def deliver(self, messages: list[dict]) -> None:
        if self.fail_with:
            raise DeliveryError(self.fail_with)
        self.delivered.extend(messages)


def apply_filters(
    filter_set: FilterSet,
    sink: FilterSink,
    clear_first: bool = False,
) -> ApplyResult:
    """Send a FilterSet to a sink and report the outcome."""
    messages = [event.to_message() for event in build_events(filter_set, clear_first)]
    try:
        sink.send(messages)
    except DeliveryError as e:
        logger.warning("Filter delivery failed: %s", e)
        return ApplyResult(
            success=False,
            message=DELIVERY_FAILURE_MESSAGE,
            error=FilterError(FailureKind.DELIVERY_FAILURE, str(e)),
            messages=messages,
        )

    count = filter_set.stat_count
    logger.info("Delivered %d messages for %d filters", len(messages), count)
    return ApplyResult(
        success=True,
        applied_count=count,
        message=f"Filters applied for {count} stats.",
        messages=messages,
    )
