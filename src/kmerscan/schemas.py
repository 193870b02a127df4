from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ScanTarget(BaseModel):
    """
    One root path to scan together with the k-mer length to count.

    Immutable for the duration of a run.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="File or directory to scan.")
    k: int = Field(..., ge=1, description="k-mer length; records shorter than k contribute nothing.")


class RootTotal(BaseModel):
    """K-mer total contributed by a single root path."""

    path: str = Field(..., description="Root path as given by the caller.")
    total: int = Field(..., ge=0, description="Number of k-mer positions found under this path.")


class ScanReport(BaseModel):
    """
    Result of scanning a set of root paths.

    Roots are listed in the order they were given, whatever order they
    finished in.
    """

    roots: list[RootTotal] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(root.total for root in self.roots)
