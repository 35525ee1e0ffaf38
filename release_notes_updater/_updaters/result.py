"""UpdateResult dataclass for document updater output."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class UpdateResult:
    """
    Result of a document updater operation.

    Attributes:
        success: Whether the operation completed successfully
        updater_name: Name of the updater that handled the operation
        error_message: Error message if operation failed
        files_written: Paths of the documents written
        scope_key: Runtime ID or channel the result belongs to ("" for run scope)
        metadata: Additional updater-specific metadata from the operation
    """

    success: bool
    updater_name: str
    error_message: Optional[str] = None
    files_written: List[str] = field(default_factory=list)
    scope_key: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate result state."""
        if self.success and self.error_message:
            raise ValueError("Successful result should not have error_message")
        if not self.success and not self.error_message:
            raise ValueError("Failed result must have error_message")

    @property
    def skipped(self) -> bool:
        return bool(self.metadata.get("skipped", False))

    @classmethod
    def success_result(
        cls,
        updater_name: str,
        files_written: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "UpdateResult":
        """Create a successful updater result."""
        return cls(
            success=True,
            updater_name=updater_name,
            error_message=None,
            files_written=[str(f) for f in files_written or []],
            metadata=metadata or {},
        )

    @classmethod
    def failure_result(
        cls,
        updater_name: str,
        error_message: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "UpdateResult":
        """Create a failed updater result."""
        return cls(
            success=False,
            updater_name=updater_name,
            error_message=error_message,
            metadata=metadata or {},
        )

    @classmethod
    def skipped_result(
        cls,
        updater_name: str,
        reason: str = "Not enabled",
    ) -> "UpdateResult":
        """Create a result indicating the updater was skipped."""
        return cls(
            success=True,
            updater_name=updater_name,
            error_message=None,
            metadata={"skipped": True, "skip_reason": reason},
        )


@dataclass
class AggregateResult:
    """
    Aggregated results from multiple updaters.

    Attributes:
        results: List of individual UpdateResult objects
    """

    results: List[UpdateResult] = field(default_factory=list)

    @property
    def files_written(self) -> List[str]:
        """Every file written, in execution order."""
        return [f for r in self.results for f in r.files_written]

    @property
    def all_successful(self) -> bool:
        """Check if all updaters completed successfully."""
        return all(r.success for r in self.results)

    @property
    def any_failures(self) -> bool:
        return any(not r.success for r in self.results)

    @property
    def failed_updaters(self) -> List[UpdateResult]:
        return [r for r in self.results if not r.success]

    @property
    def enabled_updaters(self) -> List[UpdateResult]:
        """Get results from updaters that actually ran (not skipped)."""
        return [r for r in self.results if not r.skipped]

    @property
    def skipped_updaters(self) -> List[UpdateResult]:
        """Get results from updaters that were skipped."""
        return [r for r in self.results if r.skipped]

    def add(self, result: UpdateResult) -> None:
        """Add an updater result to the aggregate."""
        self.results.append(result)

    def extend(self, other: "AggregateResult") -> None:
        self.results.extend(other.results)
