from typing import Dict, Iterable, List, Optional

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

from ascend.config import settings
from ascend.core.models import (
    Cycle,
    Exercise,
    ExerciseCycleDefaults,
    MaxRecord,
    ScheduledWorkout,
)
from ascend.data_access.dal import DataAccessLayer
from ascend.infra import log_utils


class PostgresDal(DataAccessLayer):
    """
    A Data Access Layer implementation that uses a PostgreSQL database as the backend.
    Each entity is stored as a JSONB document next to the few columns we filter
    or sort on (see init-db/schema.sql). This class fulfills the contract
    defined by the DataAccessLayer ABC.
    """

    def __init__(self, conninfo: Optional[str] = None, pool: Optional[ConnectionPool] = None):
        conninfo = conninfo or settings.DATABASE_URL
        if pool is None and not conninfo:
            raise ValueError("DATABASE_URL is not configured")
        # A small pool is plenty for a single-user planner. Rows come back as
        # dicts so documents can be handed straight to pydantic.
        self.pool = pool or ConnectionPool(
            conninfo=conninfo,
            min_size=1,
            max_size=3,
            kwargs={"row_factory": dict_row},
        )

    def close(self) -> None:
        self.pool.close()

    # --- Exercise Catalog ---
    def load_exercises(self) -> Dict[str, Exercise]:
        log_utils.log_message("[PostgresDal] Loading exercise catalog")
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT doc FROM exercises;")
                rows = cur.fetchall()
        exercises = [Exercise.model_validate(row["doc"]) for row in rows]
        return {ex.id: ex for ex in exercises}

    def save_exercise(self, exercise: Exercise) -> None:
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO exercises (id, doc) VALUES (%s, %s)
                    ON CONFLICT (id) DO UPDATE SET doc = EXCLUDED.doc;
                    """,
                    (exercise.id, Jsonb(exercise.model_dump(mode="json"))),
                )

    # --- Cycles ---
    def load_cycle(self, cycle_id: str) -> Optional[Cycle]:
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT doc FROM cycles WHERE id = %s;", (cycle_id,))
                row = cur.fetchone()
        return Cycle.model_validate(row["doc"]) if row else None

    def list_cycles(self) -> List[Cycle]:
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT doc FROM cycles ORDER BY updated_at ASC;")
                rows = cur.fetchall()
        return [Cycle.model_validate(row["doc"]) for row in rows]

    def save_cycle(self, cycle: Cycle) -> None:
        log_utils.log_message(f"[PostgresDal] Saving cycle {cycle.id}")
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO cycles (id, status, doc, updated_at) VALUES (%s, %s, %s, now())
                    ON CONFLICT (id) DO UPDATE SET
                        status = EXCLUDED.status, doc = EXCLUDED.doc, updated_at = now();
                    """,
                    (cycle.id, cycle.status, Jsonb(cycle.model_dump(mode="json"))),
                )

    # --- Scheduled Workouts ---
    def get_workouts(self, cycle_id: str) -> List[ScheduledWorkout]:
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT doc FROM scheduled_workouts WHERE cycle_id = %s ORDER BY sort_key ASC;",
                    (cycle_id,),
                )
                rows = cur.fetchall()
        return [ScheduledWorkout.model_validate(row["doc"]) for row in rows]

    def save_workouts(self, workouts: Iterable[ScheduledWorkout]) -> None:
        params = [
            (
                w.id,
                w.cycle_id,
                w.sequence_number,
                w.sort_key,
                w.status,
                Jsonb(w.model_dump(mode="json")),
            )
            for w in workouts
        ]
        if not params:
            return
        log_utils.log_message(f"[PostgresDal] Saving {len(params)} scheduled workouts")
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.executemany(
                    """
                    INSERT INTO scheduled_workouts (id, cycle_id, sequence_number, sort_key, status, doc)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    ON CONFLICT (id) DO UPDATE SET
                        cycle_id = EXCLUDED.cycle_id, sequence_number = EXCLUDED.sequence_number,
                        sort_key = EXCLUDED.sort_key, status = EXCLUDED.status, doc = EXCLUDED.doc;
                    """,
                    params,
                )

    def delete_workouts(self, workout_ids: Iterable[str]) -> None:
        ids = list(workout_ids)
        if not ids:
            return
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM scheduled_workouts WHERE id = ANY(%s);", (ids,))

    def delete_workouts_for_cycle(self, cycle_id: str) -> None:
        log_utils.log_message(f"[PostgresDal] Deleting all workouts of cycle {cycle_id}")
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM scheduled_workouts WHERE cycle_id = %s;", (cycle_id,))

    # --- Max Records ---
    def get_max_records(self, exercise_id: str) -> List[MaxRecord]:
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT doc FROM max_records WHERE exercise_id = %s ORDER BY recorded_at ASC;",
                    (exercise_id,),
                )
                rows = cur.fetchall()
        return [MaxRecord.model_validate(row["doc"]) for row in rows]

    def save_max_record(self, record: MaxRecord) -> None:
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO max_records (id, exercise_id, recorded_at, doc)
                    VALUES (%s, %s, %s, %s)
                    ON CONFLICT (id) DO NOTHING;
                    """,
                    (
                        record.id,
                        record.exercise_id,
                        record.recorded_at,
                        Jsonb(record.model_dump(mode="json")),
                    ),
                )

    # --- Last-Used Cycle Settings ---
    def load_cycle_defaults(self, exercise_id: str) -> Optional[ExerciseCycleDefaults]:
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT doc FROM exercise_cycle_defaults WHERE exercise_id = %s;",
                    (exercise_id,),
                )
                row = cur.fetchone()
        return ExerciseCycleDefaults.model_validate(row["doc"]) if row else None

    def save_cycle_defaults(self, exercise_id: str, defaults: ExerciseCycleDefaults) -> None:
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO exercise_cycle_defaults (exercise_id, doc) VALUES (%s, %s)
                    ON CONFLICT (exercise_id) DO UPDATE SET doc = EXCLUDED.doc;
                    """,
                    (exercise_id, Jsonb(defaults.model_dump(mode="json"))),
                )
