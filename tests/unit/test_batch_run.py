from adinvoice.ingestion.models import BatchRun, ItemResult, ItemStatus, RunStatus


def _result(status: ItemStatus = ItemStatus.COMPLETED) -> ItemResult:
    return ItemResult(file_name="a.pdf", status=status)


class TestBatchRun:
    def test_percent_rounds_and_handles_zero_total(self) -> None:
        run = BatchRun(run_id="r")
        assert run.report() == 0
        run.begin_processing(3)
        assert run.record(_result()) == 33
        assert run.record(_result()) == 67
        assert run.record(_result()) == 100

    def test_percent_rounds_half_up(self) -> None:
        run = BatchRun(run_id="r")
        run.begin_processing(8)
        assert run.record(_result()) == 13
        assert run.record(_result()) == 25
        assert run.record(_result()) == 38

    def test_report_passes_current_percent(self) -> None:
        run = BatchRun(run_id="r")
        run.begin_processing(2)
        run.record(_result())
        seen: list[int] = []
        assert run.report(seen.append) == 50
        assert seen == [50]

    def test_cancelled_results_do_not_advance_progress(self) -> None:
        run = BatchRun(run_id="r")
        run.begin_processing(2)
        assert run.record(_result(ItemStatus.CANCELLED), counts_as_processed=False) == 0
        assert run.snapshot().processed_count == 0

    def test_on_recorded_receives_percent(self) -> None:
        run = BatchRun(run_id="r")
        run.begin_processing(4)
        seen: list[int] = []
        run.record(_result(), on_recorded=seen.append)
        assert seen == [25]

    def test_control_flags(self) -> None:
        run = BatchRun(run_id="r")
        assert run.request_pause()
        assert not run.request_pause()
        assert run.request_resume()
        assert not run.request_resume()
        assert run.request_cancel()
        assert not run.request_cancel()
        assert not run.request_pause()
        assert run.is_cancelled

    def test_finish_builds_summary_once(self) -> None:
        run = BatchRun(run_id="r")
        run.begin_processing(4)
        run.record(_result())
        run.record(_result(ItemStatus.DUPLICATE))
        run.record(_result(ItemStatus.FAILED))
        run.record(_result(ItemStatus.CANCELLED), counts_as_processed=False)

        summary = run.finish()

        assert summary.status == RunStatus.COMPLETED
        assert (summary.successful, summary.duplicates, summary.failed, summary.cancelled) == (
            1,
            1,
            1,
            1,
        )
        assert run.done.is_set()
        assert run.is_terminal
        assert run.finish() is summary
        assert not run.request_cancel()

    def test_on_finished_runs_before_waiters_wake(self) -> None:
        run = BatchRun(run_id="r")
        seen: list[tuple[str, bool]] = []

        summary = run.finish(on_finished=lambda s: seen.append((s.run_id, run.done.is_set())))

        assert seen == [("r", False)]
        assert summary.run_id == "r"
        assert run.done.is_set()

    def test_cancelled_run_finishes_cancelled(self) -> None:
        run = BatchRun(run_id="r")
        run.request_cancel()
        assert run.finish().status == RunStatus.CANCELLED

    def test_item_result_payload(self) -> None:
        payload = ItemResult(
            file_name="b.pdf",
            status=ItemStatus.DUPLICATE,
            duplicate_type="content",
            reason="File content already exists (a.pdf)",
            existing_record_id=3,
        ).to_payload()
        assert payload == {
            "fileName": "b.pdf",
            "status": "duplicate",
            "duplicateType": "content",
            "existingRecordId": 3,
            "reason": "File content already exists (a.pdf)",
        }
