from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class ModelSpec:
    name: str
    formula: str
    view: str = "urbanicity"


def _bivariate(year: int, metric_year: int, view: str = "urbanicity") -> List[ModelSpec]:
    y = f"margin_{year}"
    return [
        ModelSpec(f"connectivity_{year}", f"{y} ~ avg_con_node_ratio_{metric_year}", view),
        ModelSpec(f"block_density_{year}", f"{y} ~ avg_block_density_{metric_year}", view),
        ModelSpec(f"network_density_{year}", f"{y} ~ avg_network_density_{metric_year}", view),
    ]


MODEL_SPECS: Tuple[ModelSpec, ...] = (
    *_bivariate(2020, 2020),
    ModelSpec("urbanicity_2020", "margin_2020 ~ pct_urban"),
    ModelSpec("multivariate_urbanicity_2020", "margin_2020 ~ avg_block_density_2020 + avg_con_node_ratio_2020 + pct_urban"),
    ModelSpec("multivariate_density_2020", "margin_2020 ~ avg_block_density_2020 + avg_con_node_ratio_2020 + avg_network_density_2020"),
    *_bivariate(2016, 2010),
    ModelSpec("multivariate_urbanicity_2016", "margin_2016 ~ avg_block_density_2010 + avg_con_node_ratio_2010 + pct_urban"),
    ModelSpec("multivariate_density_2016", "margin_2016 ~ avg_block_density_2010 + avg_con_node_ratio_2010 + avg_network_density_2010"),
    *_bivariate(2012, 2010),
    ModelSpec("multivariate_density_2012", "margin_2012 ~ avg_block_density_2010 + avg_con_node_ratio_2010 + avg_network_density_2010"),
    ModelSpec("population_change_2020", "margin_2020 ~ pop_change_2010_2018", view="presidential"),
)


@dataclass(frozen=True)
class PartyColors:
    dem: str = "blue"
    gop: str = "red"


@dataclass(frozen=True)
class ScatterSpec:
    x: str
    y: str
    x_label: str
    y_label: str
    title: str
    view: str = "urbanicity"
    y_limits: Optional[Tuple[float, float]] = None
    x_limits: Optional[Tuple[float, float]] = None


SCATTER_SPECS: Tuple[ScatterSpec, ...] = (
    ScatterSpec("pct_urban", "margin_2020", "% Urban", "2020 Margin", "Urbanicity vs. 2020 Margin", y_limits=(-100, 100)),
    ScatterSpec("pct_rural", "margin_2020", "% Rural", "2020 Margin", "Ruralicity vs. 2020 Margin", y_limits=(-100, 100)),
    ScatterSpec("avg_network_density_2020", "margin_2020", "Avg Network Density", "2020 Margin", "Network Density vs. 2020 Margin"),
    ScatterSpec("avg_block_density_2020", "margin_2020", "Avg Block Density", "2020 Margin", "Average Block Density vs. 2020 Margin"),
    ScatterSpec("avg_con_node_ratio_2020", "margin_2020", "Avg Connectivity Node Ratio", "2020 Margin", "Average Node Connectivity vs. 2020 Margin"),
    ScatterSpec("avg_network_density_2010", "margin_2016", "Avg Network Density", "2016 Margin", "Network Density vs. 2016 Margin"),
    ScatterSpec("avg_block_density_2010", "margin_2016", "Avg Block Density", "2016 Margin", "Average Block Density vs. 2016 Margin"),
    ScatterSpec("avg_network_density_2010", "margin_2012", "Avg Network Density", "2012 Margin", "Average Network Density vs. 2012 Margin"),
    ScatterSpec("avg_block_density_2010", "margin_2012", "Avg Block Density", "2012 Margin", "Average Block Density vs. 2012 Margin"),
    ScatterSpec(
        "pop_change_2010_2018", "margin_2020", "2018 Population Change", "2020 Margin",
        "Population Change vs. Margin", view="presidential", x_limits=(-0.4, 0.4),
    ),
)


@dataclass(frozen=True)
class MapParams:
    # CONUS Albers equal-area
    crs: str = "EPSG:5070"
    # AK, HI and the territories
    excluded_states: Tuple[str, ...] = ("02", "15", "60", "66", "69", "72", "78")
    missing_color: str = "#e5e5e5"
    edge_color: str = "white"
    dpi: int = 300


DENSITY_BINS: Tuple[float, ...] = (float("-inf"), 10, 20, 30, float("inf"))
DENSITY_LABELS: Tuple[str, ...] = ("Low (< 10)", "Medium (10-20)", "High (20-30)", "Very High (> 30)")

URBANICITY_BINS: Tuple[float, ...] = (float("-inf"), 25, 50, 75, 100)
URBANICITY_LABELS: Tuple[str, ...] = (
    "Rural (<25%)",
    "Low Urban (25-50%)",
    "Urban (50-75%)",
    "Highly Urban (>75%)",
)
