"""
Portfolio Stats Engine
Computes derived statistics from work-entry rows.
Provides: totals, averages, streaks, subject progress and chart series.
"""

import calendar
import math
from datetime import date, datetime, timedelta
from typing import List, Dict, Optional, Iterable
from collections import defaultdict
from loguru import logger


MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


class StatsEngine:
    """
    The Stats Engine folds a user's work entries into summary numbers.
    The statistics row is a cache: any result here can be rebuilt from the
    entries alone, so every method is a pure function of its inputs and `today`.
    """

    def __init__(self, user_id: str, today: Optional[date] = None):
        self.user_id = user_id
        self.today = today or date.today()

    # ==========================================
    # Derived statistics
    # ==========================================

    def compute_statistics(self, entries: List[Dict]) -> Dict:
        """
        Compute the cached statistics for a user.

        Args:
            entries: All of the user's work entries (any order)

        Returns:
            total_hours, average_daily_hours, max_session_hours,
            days_since_start and current_streak
        """
        hours = [self._hours(e) for e in entries]
        dates = [d for d in (self._parse_date(e.get("entry_date")) for e in entries) if d is not None]

        total_hours = sum(hours)
        # Per logged entry, not per calendar day
        average_hours = total_hours / len(hours) if hours else 0
        max_hours = max(hours + [0])
        days_since_start = (self.today - min(dates)).days if dates else 0

        stats = {
            "total_hours": total_hours,
            "average_daily_hours": average_hours,
            "max_session_hours": max_hours,
            "days_since_start": days_since_start,
            "current_streak": self.compute_streak(dates),
        }
        logger.debug(f"[STATS] user={self.user_id} entries={len(entries)} stats={stats}")
        return stats

    def compute_streak(self, dates: Iterable[date]) -> int:
        """
        Count consecutive logged days ending today, or ending yesterday when
        nothing has been logged yet today. Same-day entries count once.
        """
        distinct = sorted(set(dates), reverse=True)
        if not distinct:
            return 0

        offset = (self.today - distinct[0]).days
        if offset not in (0, 1):
            return 0

        streak = 0
        for entry_date in distinct:
            if (self.today - entry_date).days != offset + streak:
                break
            streak += 1
        return streak

    # ==========================================
    # Subjects
    # ==========================================

    def compute_subject_progress(self, subject: Dict) -> Dict:
        """Progress percentage (capped at 100) and completion for one subject"""
        current = self._number(subject.get("current_hours"))
        target = self._number(subject.get("target_hours"))

        if target > 0:
            progress = min(100, math.floor(100 * current / target + 0.5))
        else:
            progress = 0

        return {
            "progress_percent": progress,
            "completed": current >= target,
        }

    def compute_subject_breakdown(self, subjects: List[Dict]) -> List[Dict]:
        """Attach progress to every subject row"""
        return [{**subject, **self.compute_subject_progress(subject)} for subject in subjects]

    def apply_entry_to_subject(self, subject: Dict, hours_to_add: float) -> Dict:
        """Fields to write after a new entry is logged against a subject"""
        current = self._number(subject.get("current_hours")) + self._number(hours_to_add)
        return {
            "current_hours": current,
            "completed": current >= self._number(subject.get("target_hours")),
        }

    def reconcile_subject(self, subject: Dict, entries: List[Dict]) -> Dict:
        """Rebuild a subject's running total from the entries that reference it"""
        subject_id = subject.get("id")
        current = sum(
            self._hours(e) for e in entries
            if subject_id is None or e.get("subject_id") == subject_id
        )
        return {
            "current_hours": current,
            "completed": current >= self._number(subject.get("target_hours")),
        }

    # ==========================================
    # Chart series
    # ==========================================

    def compute_daily_totals(self, entries: List[Dict], year: Optional[int] = None) -> Dict[str, float]:
        """Sum hours per calendar day, keyed by ISO date"""
        totals = defaultdict(float)
        for entry in entries:
            entry_date = self._parse_date(entry.get("entry_date"))
            if entry_date is None or (year is not None and entry_date.year != year):
                continue
            totals[entry_date.isoformat()] += self._hours(entry)
        return dict(totals)

    def compute_last_seven_days(self, entries: List[Dict]) -> List[Dict]:
        """Hours for each of the 7 days ending today, oldest first"""
        totals = self.compute_daily_totals(entries)
        series = []
        for offset in range(6, -1, -1):
            day = self.today - timedelta(days=offset)
            series.append({
                "date": day.isoformat(),
                "day": day.strftime("%a"),
                "hours": totals.get(day.isoformat(), 0),
            })
        return series

    def compute_monthly_breakdown(self, entries: List[Dict], year: Optional[int] = None) -> List[Dict]:
        """
        Per-month totals for a year.

        Unlike the headline average, `average_hours` here is per distinct day worked.
        """
        year = year or self.today.year
        monthly_hours = defaultdict(float)
        monthly_days = defaultdict(set)

        for entry in entries:
            entry_date = self._parse_date(entry.get("entry_date"))
            if entry_date is None or entry_date.year != year:
                continue
            monthly_hours[entry_date.month] += self._hours(entry)
            monthly_days[entry_date.month].add(entry_date)

        breakdown = []
        for index, name in enumerate(MONTH_NAMES):
            month = index + 1
            total = monthly_hours.get(month, 0)
            days_worked = len(monthly_days.get(month, ()))
            breakdown.append({
                "month": name,
                "month_index": index,
                "total_hours": total,
                "days_worked": days_worked,
                "average_hours": total / days_worked if days_worked else 0,
            })
        return breakdown

    def compute_annual_series(self, entries: List[Dict], year: Optional[int] = None) -> Dict:
        """
        One point per day of the year, a running average and a summary.

        The running average only covers days with hours logged, and is 0 for
        days after today.
        """
        year = year or self.today.year
        totals = self.compute_daily_totals(entries, year)
        days_in_year = 366 if calendar.isleap(year) else 365
        start = date(year, 1, 1)

        points = []
        running_average = []
        running_total = 0.0
        days_with_data = 0

        for day_of_year in range(1, days_in_year + 1):
            day = start + timedelta(days=day_of_year - 1)
            hours = totals.get(day.isoformat(), 0)
            points.append({
                "date": day.isoformat(),
                "hours": hours,
                "day_of_year": day_of_year,
                "month": MONTH_NAMES[day.month - 1],
                "day": day.day,
            })

            if hours > 0:
                running_total += hours
                days_with_data += 1

            if day <= self.today:
                running_average.append(running_total / days_with_data if days_with_data else 0)
            else:
                running_average.append(0)

        total_hours = sum(p["hours"] for p in points)
        return {
            "year": year,
            "points": points,
            "running_average": running_average,
            "summary": {
                "total_hours": total_hours,
                "days_with_data": days_with_data,
                "max_hours": max(p["hours"] for p in points),
                "average_hours": total_hours / days_with_data if days_with_data else 0,
            },
        }

    # ==========================================
    # Helpers
    # ==========================================

    def _hours(self, entry: Dict) -> float:
        return self._number(entry.get("hours"))

    def _number(self, value) -> float:
        """Coerce a numeric column; missing or garbage values count as 0"""
        if value is None or isinstance(value, bool):
            return 0
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 0
        return 0 if math.isnan(number) else number

    def _parse_date(self, date_val) -> Optional[date]:
        """Parse an entry date from a date, datetime or ISO string"""
        if isinstance(date_val, datetime):
            return date_val.date()
        if isinstance(date_val, date):
            return date_val
        if isinstance(date_val, str) and date_val:
            try:
                return date.fromisoformat(date_val[:10])
            except ValueError:
                logger.warning(f"[STATS] Ignoring unparseable entry date: {date_val!r}")
        return None


def create_stats_engine(user_id: str, today: Optional[date] = None) -> StatsEngine:
    """Factory function to create a StatsEngine instance"""
    return StatsEngine(user_id, today)
