"""
Yearly climate orchestration.

Drives the season simulator through the orbital year, threading each season
into the next, and summarizes the year per tile.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

import numpy as np
import structlog

from .atmosphere import AtmosphereModel
from .climate_types import ClimateClassifier, TileClassification
from .constants import NEARLY_ZERO
from .hydrology_graph import HydrologyGraph
from .season import Season, SeasonOptions, SeasonSimulator

logger = structlog.get_logger()

SECONDS_PER_DAY = 86400.0


@dataclass
class OrchestratorOptions:
    """Year iteration options."""
    seasons_per_year: int = 12
    season: SeasonOptions = field(default_factory=SeasonOptions)

    def __post_init__(self):
        if self.seasons_per_year < 1:
            raise ValueError("seasons_per_year must be at least 1")

    @classmethod
    def from_settings(cls, settings) -> "OrchestratorOptions":
        return cls(
            seasons_per_year=settings.seasons_per_year,
            season=SeasonOptions.from_settings(settings),
        )


@dataclass
class TileYearSummary:
    """Per-tile statistics over one year of seasons."""
    temperature_min: np.ndarray  # K
    temperature_mean: np.ndarray  # K
    temperature_max: np.ndarray  # K
    precipitation: np.ndarray  # mm per year
    snow_fall: np.ndarray  # mm water equivalent per year
    sea_ice_fraction: np.ndarray  # share of the year with sea ice
    snow_cover_fraction: np.ndarray  # share of the year with snow cover


@dataclass
class YearResult:
    """Seasons of one year with their summary and classification."""
    seasons: List[Season]
    summary: TileYearSummary
    classification: TileClassification

    @property
    def final_season(self) -> Season:
        return self.seasons[-1]


class ClimateOrchestrator:
    """Runs seasons across years for one planet."""

    def __init__(
        self,
        graph: HydrologyGraph,
        atmosphere: AtmosphereModel,
        options: Optional[OrchestratorOptions] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            graph: Validated planet grid
            atmosphere: Atmosphere model of the planet
            options: Year iteration options
        """
        self.graph = graph
        self.atmosphere = atmosphere
        self.options = options or OrchestratorOptions()
        self.simulator = SeasonSimulator(graph, atmosphere, self.options.season)
        self.classifier = ClimateClassifier(graph)

        # State for next_season
        self.last_season: Optional[Season] = None
        self.elapsed_year = 0.0
        self.season_count = 0

    @property
    def period(self) -> float:
        return self.atmosphere.planet.orbit.period

    def iter_year(self, previous: Optional[Season] = None) -> Iterator[Season]:
        """
        Yield the seasons of one year as each completes.

        Args:
            previous: Final season of the previous year, None for a cold start
        """
        n = self.options.seasons_per_year
        duration = self.period / n
        for i in range(n):
            season = self.simulator.simulate(i, i / n, 1.0 / n, duration, previous)
            yield season
            previous = season

    def run_year(self, previous: Optional[Season] = None) -> YearResult:
        """Run one full year and summarize it."""
        logger.info("Running climate year", seasons=self.options.seasons_per_year,
                    cold_start=previous is None)
        seasons = list(self.iter_year(previous))
        return self.summarize(seasons)

    def prime(self) -> Season:
        """A single season spanning the whole year, used to seed the history."""
        return self.simulator.simulate(0, 0.0, 1.0, self.period, None)

    def set_climate(self) -> YearResult:
        """
        Establish the planet's climate.

        One year is run as a single season and then one as regular seasons,
        because the humidity and runoff stages settle better with history.
        """
        logger.info("Priming climate with a full-year season")
        result = self.run_year(self.prime())
        self.last_season = result.final_season
        self.elapsed_year = 0.0
        self.season_count = 0
        return result

    def next_season(self, duration: Optional[float] = None) -> Season:
        """
        Advance the climate by one season.

        Args:
            duration: Season length in s, clamped to [one day, one year];
                defaults to an equal share of the year

        Returns:
            The new season, chained from the last one
        """
        if self.last_season is None:
            self.set_climate()

        period = self.period
        if duration is None:
            duration = period / self.options.seasons_per_year
        duration = min(max(SECONDS_PER_DAY, duration), period)
        proportion = duration / period

        season = self.simulator.simulate(
            self.season_count, self.elapsed_year, proportion, duration, self.last_season
        )
        self.last_season = season
        self.season_count += 1

        self.elapsed_year += proportion
        if self.elapsed_year > 1:
            self.elapsed_year -= 1
        if self.elapsed_year < NEARLY_ZERO:
            self.elapsed_year = 0.0
        return season

    def summarize(self, seasons: List[Season]) -> YearResult:
        """Aggregate seasons into per-tile yearly statistics and classification."""
        temperatures = np.array([s.tile_values("temperature") for s in seasons])
        precipitation = np.array([s.tile_values("precipitation") for s in seasons])
        snow_fall = np.array([s.tile_values("snow_fall") for s in seasons])
        proportions = np.array([s.proportion for s in seasons])[:, None]
        sea_ice = np.array([s.tile_values("sea_ice") for s in seasons]) > 0
        snow_cover = np.array([s.tile_values("snow_cover") for s in seasons]) > 0

        summary = TileYearSummary(
            temperature_min=temperatures.min(axis=0),
            temperature_mean=temperatures.mean(axis=0),
            temperature_max=temperatures.max(axis=0),
            precipitation=precipitation.sum(axis=0),
            snow_fall=snow_fall.sum(axis=0),
            sea_ice_fraction=(sea_ice * proportions).sum(axis=0),
            snow_cover_fraction=(snow_cover * proportions).sum(axis=0),
        )
        classification = self.classifier.classify(summary.temperature_mean, summary.precipitation)

        logger.info(
            "Climate year summarized",
            mean_temperature=round(float(summary.temperature_mean.mean()), 2),
            mean_precipitation=round(float(summary.precipitation.mean()), 2),
        )
        return YearResult(seasons=seasons, summary=summary, classification=classification)
