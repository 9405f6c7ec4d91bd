"""Parameter container for bipartite rank estimation."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
import math
from typing import Any, Mapping, Optional

from bipartite_rank.errors import ConfigError

NORMALIZERS = ("HITS", "CoHITS", "BGRM", "BiRank")
DUPLICATE_POLICIES = ("add", "remove")
RETURN_MODES = ("rows", "columns", "both")
UNWEIGHTED = "unweighted"


def canonical_normalizer(name: Any) -> str:
    """Map a case-insensitive normalizer name onto its canonical spelling."""
    if isinstance(name, str):
        for candidate in NORMALIZERS:
            if candidate.lower() == name.strip().lower():
                return candidate
    raise ConfigError(
        f"Unknown normalizer: {name!r}",
        user_message=f"normalizer must be one of {', '.join(NORMALIZERS)}",
        context={"normalizer": name},
    )


def _check_damping(value: Any, label: str) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{label} must be a number, got {value!r}") from exc
    if not 0.0 < value <= 1.0:
        raise ConfigError(
            f"{label} must lie in (0, 1], got {value}",
            context={label: value},
        )
    return value


@dataclass
class RankConfig:
    sender_name: Optional[Any] = None
    receiver_name: Optional[Any] = None
    weight_name: Optional[Any] = None
    rm_weights: bool = False
    duplicates: str = "add"
    normalizer: str = "HITS"
    return_mode: str = "rows"
    return_data_frame: bool = True
    alpha: float = 0.85
    beta: float = 0.85
    max_iter: int = 200
    tol: float = 1.0e-4
    verbose: bool = False

    def validate(self) -> "RankConfig":
        """Normalize option spellings in place and reject invalid values."""
        if isinstance(self.weight_name, str) and self.weight_name == UNWEIGHTED:
            self.weight_name = None

        # Anything other than "add" keeps the first occurrence of a duplicate.
        duplicates = str(self.duplicates).lower()
        self.duplicates = "add" if duplicates == "add" else "remove"

        self.normalizer = canonical_normalizer(self.normalizer)

        return_mode = str(self.return_mode).lower()
        if return_mode not in RETURN_MODES:
            raise ConfigError(
                f"Unknown return_mode: {self.return_mode!r}",
                user_message=f"return_mode must be one of {', '.join(RETURN_MODES)}",
            )
        self.return_mode = return_mode

        self.alpha = _check_damping(self.alpha, "alpha")
        self.beta = _check_damping(self.beta, "beta")

        try:
            max_iter = int(self.max_iter)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"max_iter must be a positive integer, got {self.max_iter!r}") from exc
        if isinstance(self.max_iter, bool) or max_iter != self.max_iter or max_iter < 1:
            raise ConfigError(f"max_iter must be a positive integer, got {self.max_iter!r}")
        self.max_iter = max_iter

        try:
            tol = float(self.tol)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"tol must be a positive number, got {self.tol!r}") from exc
        if not math.isfinite(tol) or tol <= 0:
            raise ConfigError(f"tol must be a positive number, got {self.tol!r}")
        self.tol = tol

        self.rm_weights = bool(self.rm_weights)
        self.return_data_frame = bool(self.return_data_frame)
        self.verbose = bool(self.verbose)
        return self

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "RankConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ConfigError(
                f"Unknown option(s): {', '.join(unknown)}",
                context={"unknown": unknown},
            )
        return cls(**dict(options)).validate()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


__all__ = [
    "NORMALIZERS",
    "DUPLICATE_POLICIES",
    "RETURN_MODES",
    "UNWEIGHTED",
    "RankConfig",
    "canonical_normalizer",
]
