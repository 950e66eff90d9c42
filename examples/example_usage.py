"""Example: drive the dashboard screens without Flask.

Loads the current month through the dashboard view model and prints which
path answered, how long it took and the first page of each preloaded subject.
Pass a roll number to also print that student's per-subject attendance.
"""

import importlib
import sys

from smart_attend.common.datetime_utils import date_range_label
from smart_attend.config import get_settings_module
from smart_attend.container import build_container_from_settings


def main(argv):
    settings = importlib.import_module(get_settings_module())
    container = build_container_from_settings(settings)

    dashboard = container.dashboard_view_model
    dashboard.load()
    state = dashboard.state
    if state.error:
        print(f"Dashboard unavailable: {state.error}")
        container.fanout.shutdown()
        return 1

    overview = state.overview
    metrics = dashboard.performance_metrics
    print(
        f"{date_range_label(state.year, state.month)}: optimized={metrics.is_optimized_path} "
        f"in {metrics.last_load_time_ms}ms (cache hit rate {metrics.cache_hit_rate:.0%})"
    )
    print(f"students={overview.total_students} classes={overview.total_classes} rate={overview.overall_attendance:.2f}%")
    for s in overview.subject_overviews:
        print(f"  {s.subject:<10} {s.total_classes:>5} {s.average_attendance:6.2f}%")
    for subject, page in state.subject_attendance.items():
        more = " ..." if page.has_more else ""
        print(f"  {subject}: {', '.join(s.roll_number for s in page.students)}{more}")

    if len(argv) > 1:
        detail = container.student_detail_view_model
        detail.load(argv[1], state.year, state.month)
        if detail.state.error:
            print(f"Student unavailable: {detail.state.error}")
        for subject, stats in sorted(detail.state.subject_wise_attendance.items()):
            print(f"  {argv[1]} {subject:<10} {stats.attended_classes:>3}/{stats.total_classes:<3} {stats.percentage:6.2f}%")

    container.fanout.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
