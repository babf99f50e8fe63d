"""Tests for inhealth.models invariants."""

from inhealth.models import MonitorState, ProbeOutcome


class TestProbeOutcome:
    """Test ProbeOutcome dataclass behavior and invariants."""

    def test_outcome_success(self):
        """Test successful outcome keeps its rtt and has no error."""
        outcome = ProbeOutcome(host="example.com", sequence=3, rtt_seconds=0.0125)

        assert outcome.host == "example.com"
        assert outcome.sequence == 3
        assert outcome.rtt_seconds == 0.0125
        assert outcome.error is None
        assert outcome.ok is True

    def test_outcome_failure(self):
        """Test failed outcome carries the reason."""
        outcome = ProbeOutcome(host="example.com", sequence=1, rtt_seconds=None, error="timeout")

        assert outcome.rtt_seconds is None
        assert outcome.error == "timeout"
        assert outcome.ok is False

    def test_post_init_error_discards_rtt(self):
        """An error always wins over a stray rtt value."""
        outcome = ProbeOutcome(host="example.com", sequence=1, rtt_seconds=0.02, error="transport")

        assert outcome.rtt_seconds is None, "When error is set, rtt_seconds must be None"
        assert outcome.ok is False

    def test_post_init_missing_rtt_is_no_reply(self):
        """Neither rtt nor error means the probe got no reply."""
        outcome = ProbeOutcome(host="example.com", sequence=1, rtt_seconds=None)

        assert outcome.error == "no reply"
        assert outcome.ok is False

    def test_zero_rtt_is_success(self):
        """A zero round trip is still a reply."""
        outcome = ProbeOutcome(host="localhost", sequence=1, rtt_seconds=0.0)

        assert outcome.ok is True
        assert outcome.error is None


class TestMonitorState:
    def test_states(self):
        assert {state.value for state in MonitorState} == {
            "idle",
            "resolving",
            "running",
            "stopped",
            "failed",
        }
