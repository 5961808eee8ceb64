from typing import List

from progress.stats import TASKS_PER_LEVEL_STEP, level_threshold, tree_level
from taskgrove.models import Achievement, TreeProgress, UserStatsSnapshot

# (minimum level, stage name), highest first
STAGES = [
    (10, "Mighty Productivity Oak"),
    (7, "Flourishing Pine"),
    (5, "Growing Bush"),
    (3, "Young Sprout"),
    (1, "Seedling"),
]

WEEK_WARRIOR_TASKS = 10
STREAK_MASTER_DAYS = 7
TASK_VETERAN_TASKS = 25


def stage_name(level: int) -> str:
    for min_level, name in STAGES:
        if level >= min_level:
            return name
    return STAGES[-1][1]


def tree_progress(total_completed: int) -> TreeProgress:
    level = tree_level(total_completed)
    into_level = total_completed - level_threshold(level)
    # level n -> n+1 takes n * 10 completions
    span = level * TASKS_PER_LEVEL_STEP
    return TreeProgress(
        level=level,
        stage=stage_name(level),
        tasks_into_level=into_level,
        tasks_for_next_level=span - into_level,
        progress_percent=round(min(into_level / span * 100, 100.0), 1),
    )


def achievements(stats: UserStatsSnapshot) -> List[Achievement]:
    earned = []
    if stats.completed_this_week >= WEEK_WARRIOR_TASKS:
        earned.append(Achievement(
            key="week_warrior",
            title="Week Warrior",
            description=f"Completed {WEEK_WARRIOR_TASKS}+ tasks this week",
        ))
    if stats.current_streak >= STREAK_MASTER_DAYS:
        earned.append(Achievement(
            key="streak_master",
            title="Streak Master",
            description=f"{stats.current_streak}-day completion streak",
        ))
    if stats.total_completed >= TASK_VETERAN_TASKS:
        earned.append(Achievement(
            key="task_veteran",
            title="Task Veteran",
            description=f"Completed {TASK_VETERAN_TASKS}+ tasks in total",
        ))
    return earned
