# pairing_core/config.py
from dataclasses import dataclass, field


@dataclass(frozen=True)
class MatchingConfig:
    """Thresholds for slot matching and meeting-type recommendation"""
    min_slot_minutes: int = 30         # shorter overlaps are not schedulable
    strategist_proficiency: int = 4    # 1-5 scale, >= this -> LEARNING_STRATEGIST
    merge_overlapping_windows: bool = False


@dataclass(frozen=True)
class PlacementConfig:
    virtual_location: str = "Virtual"
    default_location: str = "TBD"


@dataclass(frozen=True)
class WorkbookConfig:
    # Sheet names in the roster workbook
    people_sheet: str = "people"
    subjects_sheet: str = "subjects"
    expertise_sheet: str = "expertise"
    needs_sheet: str = "needs"
    availability_sheet: str = "availability"
    meetings_sheet: str = "meetings"
    conflicts_sheet: str = "conflicts"


@dataclass(frozen=True)
class CalendarConfig:
    day_start_hour: int = 8
    day_end_hour: int = 20
    slot_minutes: int = 30


@dataclass(frozen=True)
class AppConfig:
    timezone_name: str = "America/New_York"

    matching: MatchingConfig = field(default_factory=MatchingConfig)
    placement: PlacementConfig = field(default_factory=PlacementConfig)
    workbook: WorkbookConfig = field(default_factory=WorkbookConfig)
    calendar: CalendarConfig = field(default_factory=CalendarConfig)


DEFAULT_CONFIG = AppConfig()
