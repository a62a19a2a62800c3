import math
from dataclasses import asdict, dataclass
from typing import Any

GroupKey = str | tuple[str, ...] | None


@dataclass(frozen=True)
class RegressionResult:
    """Fit of ``sale_price ~ gross_square_feet`` for one group of sales."""

    group_key: GroupKey
    slope: float
    intercept: float
    slope_stderr: float
    intercept_stderr: float
    t_value: float
    p_value: float
    intercept_t_value: float
    intercept_p_value: float
    r_squared: float
    adj_r_squared: float
    n: int

    @property
    def label(self) -> str:
        if self.group_key is None:
            return "All"
        if isinstance(self.group_key, tuple):
            return " / ".join(str(part) for part in self.group_key)
        return str(self.group_key)

    def is_significant(self, max_p_value: float, min_adj_r_squared: float) -> bool:
        # NaN compares False, so undefined fits never qualify
        return self.p_value < max_p_value and self.adj_r_squared > min_adj_r_squared

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        key = data.pop("group_key")
        if isinstance(key, tuple):
            data = {"borough": key[0], "neighborhood": key[1], **data}
        elif key is not None:
            data = {"borough": key, **data}
        return data

    @staticmethod
    def sort_key(value: float) -> tuple[bool, float]:
        """Descending sort key placing NaN last."""
        if math.isnan(value):
            return (True, 0.0)
        return (False, -value)
