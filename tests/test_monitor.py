"""Tests for the SnapshotReconciler class."""

from dtop.models import ProcessRecord, Snapshot, UiFlags
from dtop.monitor import SnapshotReconciler, aggregate, parse_percent
from tests.helpers import FakeGateway, info, record


def _proc(cpu: str, mem: str) -> ProcessRecord:
    return ProcessRecord(
        pid="1", command="sh", uptime="00:01", status="", cpu_percent=cpu, memory_percent=mem
    )


def test_parse_percent():
    """Test percentage parsing tolerates a trailing sign and rejects junk."""
    assert parse_percent("1.5") == 1.5
    assert parse_percent(" 2.0% ") == 2.0
    assert parse_percent("") is None
    assert parse_percent("n/a") is None


def test_parse_percent_rejects_non_finite():
    """Test NaN and infinities are treated as unparsable."""
    for value in ("nan", "NaN", "inf", "-inf", "infinity"):
        assert parse_percent(value) is None


def test_aggregate_ignores_non_finite_values():
    """Test a NaN or infinite process value adds nothing to the totals."""
    cpu, ram = aggregate((_proc("nan", "1.0"), _proc("2.0", "inf")))
    assert cpu == "2.0"
    assert ram == "1.0"


def test_aggregate_skips_unparsable_values():
    """Test unparsable values contribute zero."""
    cpu, ram = aggregate((_proc("1.5", "2.0"), _proc("oops", "0.5"), _proc("0.3", "")))
    assert cpu == "1.8"
    assert ram == "2.5"


def test_aggregate_empty():
    """Test a container without processes aggregates to zero."""
    assert aggregate(()) == ("0.0", "0.0")


class TestSnapshotReconciler:
    """Tests for SnapshotReconciler."""

    def test_builds_records(self):
        """Test records are built from listed containers and processes."""
        gateway = FakeGateway()
        gateway.containers = [info("a1", name="/web", image="nginx", command="nginx -g")]
        gateway.processes["a1"] = [
            ("10", "01:00", "1.0", "2.0", "nginx: master"),
            ("11", "00:59", "0.5", "1.0", "nginx: worker"),
        ]

        snapshot = SnapshotReconciler(gateway).reconcile(Snapshot())

        (container,) = snapshot.containers
        assert container.name == "/web"
        assert container.image == "nginx"
        assert container.uptime == "2 hours"
        assert container.cpu_percent == "1.5"
        assert container.memory_percent == "3.0"
        assert [p.pid for p in container.processes] == ["10", "11"]
        assert container.processes[1].command == "nginx: worker"
        assert not container.selected
        assert not container.expanded

    def test_stopped_containers_are_not_queried(self):
        """Test only running containers get a process listing."""
        gateway = FakeGateway()
        gateway.containers = [info("a1"), info("b2", status="Exited (0) 1 hour ago")]

        snapshot = SnapshotReconciler(gateway).reconcile(Snapshot())

        assert gateway.process_queries == ["a1"]
        assert snapshot.containers[1].processes == ()
        assert snapshot.containers[1].cpu_percent == "0.0"

    def test_flags_carried_by_identity(self):
        """Test selected/expanded survive while every other field changes."""
        gateway = FakeGateway()
        gateway.containers = [info("a1", name="/renamed", status="Up 3 hours"), info("c3")]
        previous = Snapshot(
            containers=[
                record("a1", name="/old", status="Exited", selected=True, expanded=True),
                record("b2", selected=True),
            ]
        )

        snapshot = SnapshotReconciler(gateway).reconcile(previous)

        by_id = {c.id: c for c in snapshot.containers}
        assert set(by_id) == {"a1", "c3"}
        assert by_id["a1"].name == "/renamed"
        assert by_id["a1"].selected and by_id["a1"].expanded
        assert not by_id["c3"].selected and not by_id["c3"].expanded

    def test_listing_failure_blanks_cycle_and_keeps_flags(self):
        """Test a failed listing yields no containers but remembers flags."""
        gateway = FakeGateway()
        gateway.containers = [info("a1")]
        reconciler = SnapshotReconciler(gateway)
        previous = Snapshot(containers=[record("a1", selected=True, expanded=True)])

        gateway.fail_listing = True
        failed = reconciler.reconcile(previous)
        assert failed.containers == []
        assert failed.retained == {"a1": UiFlags(True, True)}

        # A second failure keeps remembering
        failed_again = reconciler.reconcile(failed)
        assert failed_again.retained == {"a1": UiFlags(True, True)}

        gateway.fail_listing = False
        recovered = reconciler.reconcile(failed_again)
        assert recovered.containers[0].selected
        assert recovered.containers[0].expanded
        assert recovered.retained == {}

    def test_process_failure_is_local(self):
        """Test a failed process listing only empties that container."""
        gateway = FakeGateway()
        gateway.containers = [info("a1"), info("b2")]
        gateway.processes["b2"] = [("1", "00:01", "4.0", "1.0", "sleep")]
        gateway.failing_processes = {"a1"}

        snapshot = SnapshotReconciler(gateway).reconcile(Snapshot())

        by_id = {c.id: c for c in snapshot.containers}
        assert by_id["a1"].processes == ()
        assert by_id["b2"].cpu_percent == "4.0"

    def test_previous_snapshot_not_mutated(self):
        """Test reconciliation builds new records instead of editing old ones."""
        gateway = FakeGateway()
        gateway.containers = [info("a1", name="/new")]
        old = record("a1", name="/old", selected=True)
        previous = Snapshot(containers=[old])

        snapshot = SnapshotReconciler(gateway).reconcile(previous)

        assert snapshot.containers[0] is not old
        assert old.name == "/old"
