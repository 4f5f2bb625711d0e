from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from ascend.core.models import (
    Cycle,
    Exercise,
    ExerciseCycleDefaults,
    MaxRecord,
    ScheduledWorkout,
)


class DataAccessLayer(ABC):
    """
    Abstract Base Class for a Data Access Layer.
    Defines the contract for all data storage operations, ensuring that
    the planning logic can interact with any storage backend (JSON, DB, etc.)
    through a consistent interface. The schedule engine itself never calls
    this; only the orchestrator and the CLI do.
    """

    # --- Exercise catalog ---
    @abstractmethod
    def load_exercises(self) -> Dict[str, Exercise]:
        """Loads the exercise catalog keyed by exercise id."""
        pass

    @abstractmethod
    def save_exercise(self, exercise: Exercise) -> None:
        """Inserts or replaces one exercise."""
        pass

    # --- Cycles ---
    @abstractmethod
    def load_cycle(self, cycle_id: str) -> Optional[Cycle]:
        """Loads a cycle, or None if it does not exist."""
        pass

    @abstractmethod
    def list_cycles(self) -> List[Cycle]:
        """Loads every stored cycle."""
        pass

    @abstractmethod
    def save_cycle(self, cycle: Cycle) -> None:
        """Inserts or replaces a cycle."""
        pass

    # --- Scheduled workouts ---
    @abstractmethod
    def get_workouts(self, cycle_id: str) -> List[ScheduledWorkout]:
        """
        Retrieves all workouts of a cycle.

        Returns:
            Workouts ordered by sort_key.
        """
        pass

    @abstractmethod
    def save_workouts(self, workouts: Iterable[ScheduledWorkout]) -> None:
        """Bulk insert-or-replace of workouts."""
        pass

    @abstractmethod
    def delete_workouts(self, workout_ids: Iterable[str]) -> None:
        """Deletes the given workouts; unknown ids are ignored."""
        pass

    @abstractmethod
    def delete_workouts_for_cycle(self, cycle_id: str) -> None:
        """Deletes every workout of a cycle."""
        pass

    # --- Max records ---
    @abstractmethod
    def get_max_records(self, exercise_id: str) -> List[MaxRecord]:
        """Retrieves all max records for an exercise."""
        pass

    @abstractmethod
    def save_max_record(self, record: MaxRecord) -> None:
        """Appends a max record."""
        pass

    # --- Last-used cycle settings ---
    @abstractmethod
    def load_cycle_defaults(self, exercise_id: str) -> Optional[ExerciseCycleDefaults]:
        """Loads the settings an exercise was last configured with in a cycle."""
        pass

    @abstractmethod
    def save_cycle_defaults(self, exercise_id: str, defaults: ExerciseCycleDefaults) -> None:
        """Stores the settings an exercise was last configured with."""
        pass
