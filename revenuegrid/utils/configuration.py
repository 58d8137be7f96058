import os
from dataclasses import dataclass, field
from typing import List


MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

BACKENDS = ("sqlite", "api", "memory")


@dataclass
class GridDefaults:
    default_rows: int
    default_columns: List[str]

    # Quiet period before a change gets written
    debounce_ms: int
    # Time the guard stays up after a write, absorbs the notification of our own write
    settle_ms: int

    @staticmethod
    def get_default() -> "GridDefaults":
        return GridDefaults(
            default_rows=10,
            default_columns=list(MONTHS),
            debounce_ms=500,
            settle_ms=300,
        )


@dataclass
class Persistence:
    backend: str

    db_location: str

    api_url: str
    api_key: str
    api_table: str

    # Empty means no local cache
    cache_location: str

    poll_interval: float

    def has_api_credentials(self) -> bool:
        return all(v != "" for v in (self.api_url, self.api_key, self.api_table))

    def has_cache(self) -> bool:
        return self.cache_location != ""

    @staticmethod
    def get_default() -> "Persistence":
        return Persistence(
            backend="sqlite",
            db_location=os.path.join(os.getcwd(), "revenuegrid.db"),
            api_url="",
            api_key="",
            api_table="excel_table_data",
            cache_location="",
            poll_interval=2.0,
        )

    def get_api_info(self) -> dict:
        return dict(
            url=self.api_url,
            key=self.api_key,
            table=self.api_table,
        )


@dataclass
class Misc:
    table_name: str
    log_level: str

    @staticmethod
    def get_default() -> "Misc":
        return Misc(
            table_name="revenue",
            log_level="INFO",
        )


@dataclass
class Configuration:
    grid: GridDefaults = field(default_factory=GridDefaults.get_default)
    persistence: Persistence = field(default_factory=Persistence.get_default)
    misc: Misc = field(default_factory=Misc.get_default)

    @staticmethod
    def get_default() -> "Configuration":
        return Configuration(
            grid=GridDefaults.get_default(),
            persistence=Persistence.get_default(),
            misc=Misc.get_default(),
        )

    @staticmethod
    def from_json(json: dict) -> "Configuration":
        grid_values = json["Grid"]
        persistence_values = json["Persistence"]

        grid = GridDefaults(
            default_rows=int(grid_values["Rows"]),
            default_columns=list(grid_values["Columns"]),
            debounce_ms=int(grid_values["Debounce (ms)"]),
            settle_ms=int(grid_values["Settle (ms)"]),
        )

        persistence = Persistence(
            backend=persistence_values["Backend"],
            db_location=persistence_values["Database location"],
            api_url=persistence_values["API"]["url"],
            api_key=persistence_values["API"]["key"],
            api_table=persistence_values["API"]["table"],
            cache_location=persistence_values["Cache location"],
            poll_interval=float(persistence_values["Poll interval (s)"]),
        )

        misc = Misc(
            table_name=json["misc"]["Table"],
            log_level=json["misc"]["Log level"],
        )

        return Configuration(grid=grid, persistence=persistence, misc=misc)

    def to_json(self) -> dict:
        return {
            "Grid": {
                "Rows": self.grid.default_rows,
                "Columns": list(self.grid.default_columns),
                "Debounce (ms)": self.grid.debounce_ms,
                "Settle (ms)": self.grid.settle_ms,
            },
            "Persistence": {
                "Backend": self.persistence.backend,
                "Database location": self.persistence.db_location,
                "API": self.persistence.get_api_info(),
                "Cache location": self.persistence.cache_location,
                "Poll interval (s)": self.persistence.poll_interval,
            },
            "misc": {
                "Table": self.misc.table_name,
                "Log level": self.misc.log_level,
            },
        }
