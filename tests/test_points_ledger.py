import threading
from datetime import datetime, timezone

import pytest

import auth_service
import points_ledger
from errors import InvalidAwardError, NotFoundError


def test_awards_accumulate_to_sum_of_magnitudes(repo, alex):
    magnitudes = [5, 120, 1, 99, 40, 250]
    for m in magnitudes:
        total, level = points_ledger.apply_award("mock-alex", "mood", m, repo=repo)

    assert total == sum(magnitudes)
    assert level == sum(magnitudes) // 250 + 1
    assert repo.get_user("mock-alex").total_points == sum(magnitudes)


def test_crossing_a_level_boundary(repo, alex):
    assert points_ledger.apply_award("mock-alex", "social", 240, repo=repo) == (240, 1)
    assert points_ledger.apply_award("mock-alex", "social", 15, repo=repo) == (255, 2)


@pytest.mark.parametrize("magnitude", [0, -5, 1.5, "10", None, True])
def test_invalid_magnitude_is_rejected_without_side_effects(repo, alex, magnitude):
    points_ledger.apply_award("mock-alex", "mood", 10, repo=repo)
    before = repo.get_user("mock-alex")

    with pytest.raises(InvalidAwardError):
        points_ledger.apply_award("mock-alex", "mood", magnitude, repo=repo)

    assert repo.get_user("mock-alex") == before
    assert len(repo.list_awards("mock-alex")) == 1


def test_unknown_category_is_rejected(repo, alex):
    with pytest.raises(InvalidAwardError):
        points_ledger.apply_award("mock-alex", "homework", 10, repo=repo)
    assert repo.get_user("mock-alex").total_points == 0


def test_unknown_user_raises_not_found(repo):
    with pytest.raises(NotFoundError):
        points_ledger.apply_award("ghost", "mood", 10, repo=repo)
    assert repo.list_awards("ghost") == []


def test_category_breakdown_sums_to_total(repo, alex):
    points_ledger.apply_award("mock-alex", "mood", 5, repo=repo)
    points_ledger.apply_award("mock-alex", "sustainability", 30, repo=repo)
    points_ledger.apply_award("mock-alex", "sustainability", 7, repo=repo)

    user = repo.get_user("mock-alex")
    assert user.category_points == {"mood": 5, "safety": 0, "sustainability": 37, "social": 0}
    assert sum(user.category_points.values()) == user.total_points


def test_last_active_moves_with_each_award(repo, alex):
    points_ledger.apply_award("mock-alex", "mood", 5, repo=repo)
    award = repo.list_awards("mock-alex")[0]
    assert repo.get_user("mock-alex").last_active == award.timestamp


def test_concurrent_awards_lose_no_update(repo, alex):
    def worker():
        for _ in range(25):
            points_ledger.apply_award("mock-alex", "mood", 2, repo=repo)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert repo.get_user("mock-alex").total_points == 8 * 25 * 2
    assert len(repo.list_awards("mock-alex")) == 8 * 25


def test_profile_reports_progress(repo, alex):
    points_ledger.apply_award("mock-alex", "mood", 375, repo=repo)
    profile = points_ledger.get_profile("mock-alex", repo=repo)

    assert profile["total_points"] == 375
    assert profile["level"] == 2
    assert profile["points_to_next_level"] == 125
    assert profile["level_progress"] == 50.0
    assert profile["rank_title"] == "Advanced"


def test_profile_of_unknown_user(repo):
    with pytest.raises(NotFoundError):
        points_ledger.get_profile("ghost", repo=repo)


def test_award_history_is_newest_first(repo, alex):
    for m in (1, 2, 3):
        points_ledger.apply_award("mock-alex", "mood", m, reason=f"r{m}", repo=repo)

    history = points_ledger.get_award_history("mock-alex", repo=repo)
    assert [a.magnitude for a in history] == [3, 2, 1]
    assert [a.magnitude for a in points_ledger.get_award_history("mock-alex", limit=2, repo=repo)] == [3, 2]


def test_default_repository_comes_from_config(repo):
    auth_service.ensure_user("mock-sam", "sam@campus.edu")
    assert points_ledger.apply_award("mock-sam", "safety", 20) == (20, 1)
    assert repo.get_user("mock-sam").total_points == 20


def fixed_clock(monkeypatch, *moments):
    clock = iter(moments)
    monkeypatch.setattr(points_ledger, "utc_now", lambda: next(clock))


def test_daily_streak_grows_and_resets(repo, alex, monkeypatch):
    days = [datetime(2025, 3, d, 12, tzinfo=timezone.utc) for d in (1, 1, 2, 3, 6)]
    fixed_clock(monkeypatch, *days)

    streaks = []
    for _ in days:
        points_ledger.apply_award("mock-alex", "mood", 5, repo=repo)
        user = repo.get_user("mock-alex")
        streaks.append((user.current_streak, user.longest_streak))

    assert streaks == [(1, 1), (1, 1), (2, 2), (3, 3), (1, 3)]
    profile = points_ledger.get_profile("mock-alex", repo=repo)
    assert (profile["current_streak"], profile["longest_streak"]) == (1, 3)


def test_week_long_streak_unlocks_streak_keeper(repo, alex, monkeypatch):
    fixed_clock(monkeypatch, *[datetime(2025, 3, d, 9, tzinfo=timezone.utc) for d in range(1, 8)])
    for _ in range(7):
        points_ledger.apply_award("mock-alex", "safety", 1, repo=repo)

    assert "streak-keeper" in repo.get_user("mock-alex").achievements


def test_achievement_unlocks_once_and_adds_no_points(repo, alex, monkeypatch):
    moments = [datetime(2025, 3, 1, 8, minute, tzinfo=timezone.utc) for minute in range(8)]
    fixed_clock(monkeypatch, *moments)

    for _ in moments:
        total, _ = points_ledger.apply_award("mock-alex", "mood", 5, repo=repo)

    user = repo.get_user("mock-alex")
    assert total == 40
    assert total == sum(a.magnitude for a in repo.list_awards("mock-alex"))
    # reached 35 points on the seventh award and kept that time
    assert user.achievements == {"mood-master": moments[6]}
    assert points_ledger.get_profile("mock-alex", repo=repo)["achievements"] == ["mood-master"]


def test_achievement_progress_rows(repo, alex):
    points_ledger.apply_award("mock-alex", "sustainability", 60, repo=repo)
    points_ledger.apply_award("mock-alex", "mood", 100, repo=repo)

    rows = {row["id"]: row for row in points_ledger.get_achievements("mock-alex", repo=repo)}

    assert set(rows) == {"mood-master", "waste-warrior", "streak-keeper", "wellness-champion"}
    assert rows["mood-master"]["progress"] == 35
    assert rows["mood-master"]["unlocked"]
    assert rows["waste-warrior"]["progress"] == 60
    assert rows["waste-warrior"]["unlocked_at"] is None
    assert rows["wellness-champion"]["unlocked"]


def test_achievements_of_unknown_user(repo):
    with pytest.raises(NotFoundError):
        points_ledger.get_achievements("ghost", repo=repo)
