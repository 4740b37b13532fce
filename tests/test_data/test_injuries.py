"""
Tests for injury reports and availability impact.
"""

import pytest

from backline.data.injuries import InjuryStatus, PlayerInjury, Position, TeamInjuryReport


def test_healthy_roster():
    report = TeamInjuryReport("KC")
    assert report.availability_impact == 0.0
    assert report.qb1_active
    assert report.key_players_out_count == 0


def test_questionable_qb_counts_half():
    report = TeamInjuryReport("KC", (PlayerInjury("QB1", Position.QB, InjuryStatus.QUESTIONABLE),))
    assert report.availability_impact == pytest.approx(0.5)
    assert report.qb1_active


def test_doubtful_qb_is_out():
    report = TeamInjuryReport("KC", (PlayerInjury("QB1", Position.QB, InjuryStatus.DOUBTFUL),))
    assert not report.qb1_active
    assert report.key_players_out_count == 1


def test_backups_do_not_count():
    report = TeamInjuryReport(
        "KC", (PlayerInjury("QB2", Position.QB, InjuryStatus.OUT, is_starter=False),)
    )
    assert report.availability_impact == 0.0
    assert report.qb1_active


def test_impacts_sum():
    report = TeamInjuryReport(
        "KC",
        (
            PlayerInjury("WR1", Position.WR, InjuryStatus.OUT),
            PlayerInjury("K", Position.K, InjuryStatus.IR),
        ),
    )
    assert report.availability_impact == pytest.approx(0.35 + 0.05)
