"""
In-memory stand-in for the Supabase query builder used by SupabaseService.

Supports the subset of the PostgREST builder the service calls
(select/insert/update/delete, eq/neq, order, limit, execute) and mimics the
backend behaviour the application relies on:

- UNIQUE(users.mobile), UNIQUE(weight_history.user_id, recorded_date) and
  UNIQUE(achievements.user_id, achievement_type, achievement_value), reported
  as code 23505; a multi-row insert stores every row or none
- cascade delete of weight history and achievements with their user
- the points trigger on weight_history writes
- column defaults (id, points, join_date, recorded_date, timestamps)
"""
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from services.points import points_per_kg_lost

UNIQUE_KEYS = {
    'users': [('mobile',)],
    'weight_history': [('user_id', 'recorded_date')],
    'achievements': [('user_id', 'achievement_type', 'achievement_value')],
}


class FakeAPIError(Exception):
    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class FakeResponse:
    def __init__(self, data: List[Dict[str, Any]]):
        self.data = data


class FakeSupabaseClient:
    def __init__(self, points_formula: Callable[[float, float], int] = points_per_kg_lost):
        self.tables: Dict[str, List[Dict[str, Any]]] = {name: [] for name in UNIQUE_KEYS}
        self.points_formula = points_formula
        self.failures: Set[Tuple[str, str]] = set()
        self.calls: List[Tuple[str, str]] = []
        self._clock = datetime(2026, 10, 1, 8, 0, tzinfo=timezone.utc)

    def table(self, name: str) -> 'FakeQuery':
        return FakeQuery(self, name)

    def fail(self, table: str, operation: str) -> None:
        """Make every later `operation` on `table` raise"""
        self.failures.add((table, operation))

    def recover(self) -> None:
        self.failures.clear()

    def tick(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return [dict(row) for row in self.tables[table]]

    def run_points_trigger(self, user_id: str) -> None:
        for user in self.tables['users']:
            if user['id'] == user_id:
                user['points'] = self.points_formula(
                    float(user['start_weight']), float(user['current_weight'])
                )


class FakeQuery:
    def __init__(self, client: FakeSupabaseClient, table: str):
        self.client = client
        self.table_name = table
        self.operation = 'select'
        self.payload: Any = None
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.orders: List[Tuple[str, bool]] = []
        self.limit_count: Optional[int] = None

    # Builder
    def select(self, columns: str = '*') -> 'FakeQuery':
        self.operation = 'select'
        return self

    def insert(self, data: Any) -> 'FakeQuery':
        self.operation = 'insert'
        self.payload = data if isinstance(data, list) else [data]
        return self

    def update(self, data: Dict[str, Any]) -> 'FakeQuery':
        self.operation = 'update'
        self.payload = data
        return self

    def delete(self) -> 'FakeQuery':
        self.operation = 'delete'
        return self

    def eq(self, column: str, value: Any) -> 'FakeQuery':
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column: str, value: Any) -> 'FakeQuery':
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def order(self, column: str, desc: bool = False) -> 'FakeQuery':
        self.orders.append((column, desc))
        return self

    def limit(self, count: int) -> 'FakeQuery':
        self.limit_count = count
        return self

    # Execution
    def execute(self) -> FakeResponse:
        self.client.calls.append((self.table_name, self.operation))
        if (self.table_name, self.operation) in self.client.failures:
            raise FakeAPIError(f"{self.operation} on {self.table_name} failed", code='08006')

        handler = getattr(self, f'_execute_{self.operation}')
        return FakeResponse(handler())

    def _matching(self) -> List[Dict[str, Any]]:
        rows = self.client.tables[self.table_name]
        return [row for row in rows if all(f(row) for f in self.filters)]

    def _execute_select(self) -> List[Dict[str, Any]]:
        rows = self._matching()
        for column, desc in reversed(self.orders):
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            rows = sorted(present, key=lambda r: r[column], reverse=desc) + missing
        if self.limit_count is not None:
            rows = rows[:self.limit_count]
        return [dict(row) for row in rows]

    def _execute_insert(self) -> List[Dict[str, Any]]:
        inserted = []
        for data in self.payload:
            row = self._with_defaults(dict(data))
            self._check_unique(row, batch=inserted)
            inserted.append(row)

        self.client.tables[self.table_name].extend(inserted)
        if self.table_name == 'weight_history':
            for row in inserted:
                self.client.run_points_trigger(row['user_id'])
        return [dict(row) for row in inserted]

    def _execute_update(self) -> List[Dict[str, Any]]:
        updated = []
        for row in self._matching():
            candidate = dict(row, **self.payload)
            self._check_unique(candidate, ignore=row)
            row.update(self.payload)
            updated.append(row)
            if self.table_name == 'weight_history':
                self.client.run_points_trigger(row['user_id'])
        return [dict(row) for row in updated]

    def _execute_delete(self) -> List[Dict[str, Any]]:
        doomed = self._matching()
        ids = {row['id'] for row in doomed}
        self.client.tables[self.table_name] = [
            row for row in self.client.tables[self.table_name] if row['id'] not in ids
        ]
        if self.table_name == 'users':
            for child in ('weight_history', 'achievements'):
                self.client.tables[child] = [
                    row for row in self.client.tables[child] if row['user_id'] not in ids
                ]
        return [dict(row) for row in doomed]

    def _with_defaults(self, row: Dict[str, Any]) -> Dict[str, Any]:
        now = self.client.tick()
        row.setdefault('id', str(uuid.uuid4()))
        if self.table_name == 'users':
            row.setdefault('points', 0)
            row.setdefault('join_date', now)
            row.setdefault('created_at', now)
            row.setdefault('updated_at', now)
        elif self.table_name == 'weight_history':
            row.setdefault('recorded_date', now[:10])
            row.setdefault('created_at', now)
        elif self.table_name == 'achievements':
            row.setdefault('achievement_value', None)
            row.setdefault('earned_at', now)
        return row

    def _check_unique(self, row: Dict[str, Any], ignore: Optional[Dict[str, Any]] = None,
                      batch: Optional[List[Dict[str, Any]]] = None) -> None:
        others = self.client.tables[self.table_name] + (batch or [])
        for columns in UNIQUE_KEYS[self.table_name]:
            for other in others:
                if other is ignore:
                    continue
                if all(other.get(c) == row.get(c) for c in columns):
                    raise FakeAPIError(
                        f"duplicate key value violates unique constraint on {columns}",
                        code='23505'
                    )
