"""
Configuration schema for vita-rf.

Pydantic models for forest hyperparameters, the Vita selection procedure,
toy-data simulation and a full CLI selection run. Defaults mirror
``vita_rf.config.defaults``.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, model_validator

from vita_rf.config.defaults import SAMPLE_FRACTION_NO_REPLACE

# ============================================================================
# Random Forest Configuration
# ============================================================================


class ForestConfig(BaseModel):
    """Hyperparameters handed to the random-forest trainer.

    ``mtry_prop`` and ``nodesize_prop`` are proportions of the feature and
    sample counts; they are turned into absolute values at fit time.
    """

    model_config = ConfigDict(extra="forbid")

    ntree: int = Field(default=500, ge=1)
    mtry_prop: float = Field(default=0.2, gt=0.0, le=1.0)
    nodesize_prop: float = Field(default=0.1, ge=0.0, lt=1.0)
    no_threads: int = Field(default=1, ge=1)
    tree_type: Literal["regression", "classification", "probability"] = "regression"
    importance: Literal["none", "impurity", "impurity_corrected", "permutation"] = (
        "impurity_corrected"
    )
    replace: bool = True
    sample_fraction: float | None = Field(default=None, gt=0.0, le=1.0)
    perm_repeats: int = Field(default=1, ge=1)
    random_state: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def resolve_sample_fraction(self):
        """Fill in the sample fraction implied by the replacement flag."""
        if self.sample_fraction is None:
            self.sample_fraction = 1.0 if self.replace else SAMPLE_FRACTION_NO_REPLACE
        return self

    def to_fit_kwargs(self) -> dict:
        """Keyword arguments accepted by ``fit_forest`` / ``holdout_rf``."""
        return self.model_dump()


# ============================================================================
# Vita Selection Configuration
# ============================================================================


class VitaConfig(BaseModel):
    """Configuration for Vita variable selection."""

    model_config = ConfigDict(extra="forbid")

    p_t: float = Field(default=0.05, ge=0.0, le=1.0)
    fdr_adj: bool = True
    fdr_method: Literal["fdr_bh", "fdr_by"] = "fdr_bh"
    conf_level: float = Field(default=0.95, gt=0.0, lt=1.0)
    holdout: StrictBool = False
    forest: ForestConfig = Field(default_factory=ForestConfig)

    @model_validator(mode="after")
    def validate_importance_mode(self):
        """Hold-out forests need permutation importance, single forests need corrected impurity."""
        if self.holdout and self.forest.importance != "permutation":
            raise ValueError(
                f"holdout=True requires forest.importance='permutation' "
                f"(got '{self.forest.importance}')."
            )
        if not self.holdout and self.forest.importance != "impurity_corrected":
            raise ValueError(
                f"holdout=False requires forest.importance='impurity_corrected' "
                f"(got '{self.forest.importance}')."
            )
        return self


# ============================================================================
# Simulation Configuration
# ============================================================================


class SimulationConfig(BaseModel):
    """Configuration for the correlated-group toy data generator."""

    model_config = ConfigDict(extra="forbid")

    no_samples: int = Field(default=100, ge=2)
    group_size: list[int] = Field(default_factory=lambda: [10, 10, 10, 10, 10, 10])
    no_var_total: int = Field(default=500, ge=1)
    corr: float = Field(default=0.9, ge=0.0, lt=1.0)
    effects: list[float] = Field(default_factory=lambda: [3.0, -3.0, 2.0, -2.0, 1.0, -1.0])
    noise_sd: float = Field(default=1.0, ge=0.0)
    random_state: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def validate_groups(self):
        """Groups must fit into the total variable count and match the effects."""
        if any(g < 1 for g in self.group_size):
            raise ValueError(f"group_size entries must be >= 1 (got {self.group_size}).")
        if sum(self.group_size) > self.no_var_total:
            raise ValueError(
                f"sum(group_size)={sum(self.group_size)} exceeds "
                f"no_var_total={self.no_var_total}."
            )
        if len(self.effects) != len(self.group_size):
            raise ValueError(
                f"effects has {len(self.effects)} entries but there are "
                f"{len(self.group_size)} groups."
            )
        return self


# ============================================================================
# Selection Run Configuration (CLI)
# ============================================================================


class OutputConfig(BaseModel):
    """Which artifacts a selection run writes."""

    outdir: Path = Field(default=Path("results"))
    save_plots: bool = True
    plot_format: Literal["png", "pdf", "svg"] = "png"
    plot_top_n: int = Field(default=30, ge=1)
    save_forest: bool = False


class SelectRunConfig(BaseModel):
    """Complete configuration of a ``vita select`` run."""

    infile: Path | None = None
    target_col: str = "y"
    id_col: str | None = None
    feature_cols: list[str] | None = None
    run_id: str | None = None
    vita: VitaConfig = Field(default_factory=VitaConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
