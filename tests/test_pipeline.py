"""
Unit tests for PipelineOrchestrator.

Tests sequential execution, the fact-check revision loop, fail-fast
behavior and execution logging. Agents are mocked except in the
end-to-end test, which mocks only the LLM and search clients.
"""

import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from content_pipeline.agents.base import (
    FactCheckError,
    PolishError,
    ResearchError,
    WriterError,
)
from content_pipeline.agents.fact_checker import FactCheckerAgent, FactCheckResult
from content_pipeline.agents.polisher import PolisherAgent
from content_pipeline.agents.researcher import ResearcherAgent
from content_pipeline.agents.writer import WriterAgent
from content_pipeline.database.models import AgentNameEnum
from content_pipeline.schemas import (
    ErrorMetadata,
    FactCheckAttemptMetadata,
    RevisionMetadata,
    WarningMetadata,
)
from content_pipeline.services.pipeline import (
    PipelineError,
    PipelineOrchestrator,
    PipelineStage,
)


def mock_agent(agent_class, **run_kwargs):
    agent = MagicMock(spec=agent_class)
    agent.run = AsyncMock(**run_kwargs)
    return agent


@pytest.fixture
def agents():
    """Mocked agents with a passing fact-check by default."""
    return {
        "researcher": mock_agent(ResearcherAgent, return_value="RESEARCH"),
        "writer": mock_agent(WriterAgent, return_value="DRAFT"),
        "fact_checker": mock_agent(
            FactCheckerAgent, return_value=FactCheckResult(passed=True, issues=[])
        ),
        "polisher": mock_agent(PolisherAgent, return_value="FINAL"),
    }


@pytest.fixture
def orchestrator(agents, mock_run_logger):
    return PipelineOrchestrator(
        run_logger=mock_run_logger, max_fact_check_retries=2, **agents
    )


def logged(run_logger):
    """(agent, input, output, metadata) for every append() call, in order."""
    return [call.args[1:] for call in run_logger.append.call_args_list]


class TestSuccessfulRun:
    """Test the happy path."""

    @pytest.mark.asyncio
    async def test_first_check_passes(self, orchestrator, agents, mock_run_logger):
        """Each agent runs once and the outputs flow through in order."""
        run = await orchestrator.run_pipeline("PRD")

        assert run.research == "RESEARCH"
        assert run.draft == "DRAFT"
        assert run.fact_check_passed is True
        assert run.final_post == "FINAL"

        agents["researcher"].run.assert_awaited_once_with("PRD")
        agents["writer"].run.assert_awaited_once_with("PRD", "RESEARCH")
        agents["fact_checker"].run.assert_awaited_once_with("DRAFT", "RESEARCH")
        agents["polisher"].run.assert_awaited_once_with("DRAFT")

        entries = logged(mock_run_logger)
        assert [entry[0] for entry in entries] == [
            AgentNameEnum.RESEARCHER,
            AgentNameEnum.WRITER,
            AgentNameEnum.FACT_CHECKER,
            AgentNameEnum.POLISHER,
        ]

    @pytest.mark.asyncio
    async def test_log_entries_share_run_id(self, orchestrator, mock_run_logger):
        """Every entry of a run carries the run's id."""
        run = await orchestrator.run_pipeline("PRD")

        run_ids = {call.args[0] for call in mock_run_logger.append.call_args_list}
        assert run_ids == {run.run_id}

    @pytest.mark.asyncio
    async def test_run_ids_are_unique(self, orchestrator):
        """Two runs never share an id."""
        first = await orchestrator.run_pipeline("PRD")
        second = await orchestrator.run_pipeline("PRD")

        assert first.run_id != second.run_id

    @pytest.mark.asyncio
    async def test_logged_inputs_and_outputs(self, orchestrator, mock_run_logger):
        """Writer input is the JSON of document and research; fact-check output is the verdict JSON."""
        await orchestrator.run_pipeline("PRD")

        researcher, writer, fact_checker, polisher = logged(mock_run_logger)
        assert researcher[1:3] == ("PRD", "RESEARCH")
        assert json.loads(writer[1]) == {"prd": "PRD", "research": "RESEARCH"}
        assert writer[2] == "DRAFT"
        assert fact_checker[1] == "DRAFT"
        assert json.loads(fact_checker[2]) == {"passed": True, "issues": []}
        assert fact_checker[3] == FactCheckAttemptMetadata(attempt=1, passed=True, issues=[])
        assert polisher[1:3] == ("DRAFT", "FINAL")

    @pytest.mark.asyncio
    async def test_result_uses_camel_case(self, orchestrator):
        """The caller-facing result serializes with camelCase keys."""
        run = await orchestrator.run_pipeline("PRD")

        data = run.to_result().model_dump(mode="json", by_alias=True)
        assert data == {
            "runId": str(run.run_id),
            "research": "RESEARCH",
            "draft": "DRAFT",
            "factCheckPassed": True,
            "finalPost": "FINAL",
        }


class TestFactCheckLoop:
    """Test the bounded revise/re-check loop."""

    @pytest.mark.asyncio
    async def test_revision_then_pass(self, orchestrator, agents, mock_run_logger):
        """A failed verdict triggers one revision, and the revised draft is re-checked."""
        agents["fact_checker"].run.side_effect = [
            FactCheckResult(passed=False, issues=["Claim A", "Claim B"]),
            FactCheckResult(passed=True, issues=[]),
        ]
        agents["writer"].run.side_effect = ["DRAFT", "REVISED"]

        run = await orchestrator.run_pipeline("PRD")

        assert run.fact_check_passed is True
        assert run.draft == "REVISED"
        agents["polisher"].run.assert_awaited_once_with("REVISED")

        revision_call = agents["writer"].run.call_args_list[1]
        assert revision_call.args == (
            "PRD",
            "RESEARCH\n\nREVISION FEEDBACK: The fact-checker found these issues: "
            "Claim A, Claim B. Please revise the draft to address them.",
        )
        assert agents["fact_checker"].run.call_args_list[1].args == ("REVISED", "RESEARCH")

        entries = logged(mock_run_logger)
        revision_entry = entries[3]
        assert revision_entry[0] == AgentNameEnum.WRITER
        assert revision_entry[3] == RevisionMetadata(attempt=2)
        assert "revisionFeedback" in json.loads(revision_entry[1])
        assert entries[4][3] == FactCheckAttemptMetadata(attempt=2, passed=True, issues=[])

    @pytest.mark.asyncio
    async def test_retries_exhausted(self, orchestrator, agents, mock_run_logger):
        """With every verdict failing, the run proceeds with fact_check_passed False."""
        agents["fact_checker"].run.side_effect = [
            FactCheckResult(passed=False, issues=["Claim A"]),
            FactCheckResult(passed=False, issues=["Claim C"]),
        ]
        agents["writer"].run.side_effect = ["DRAFT", "REVISED"]

        run = await orchestrator.run_pipeline("PRD")

        assert run.fact_check_passed is False
        assert run.final_post == "FINAL"
        assert agents["writer"].run.await_count == 2
        assert agents["fact_checker"].run.await_count == 2
        agents["polisher"].run.assert_awaited_once_with("REVISED")

        entries = logged(mock_run_logger)
        assert [entry[0] for entry in entries] == [
            AgentNameEnum.RESEARCHER,
            AgentNameEnum.WRITER,
            AgentNameEnum.FACT_CHECKER,
            AgentNameEnum.WRITER,
            AgentNameEnum.FACT_CHECKER,
            AgentNameEnum.FACT_CHECKER,
            AgentNameEnum.POLISHER,
        ]
        warning_entry = entries[5]
        assert warning_entry[2] == "Max retries reached"
        assert isinstance(warning_entry[3], WarningMetadata)
        assert warning_entry[3].warning.message == "Proceeding despite fact-check failures"
        assert warning_entry[3].warning.final_issues == ["Claim C"]

    @pytest.mark.asyncio
    async def test_single_attempt_limit(self, agents, mock_run_logger):
        """With one attempt allowed, a failed verdict is never revised."""
        agents["fact_checker"].run.return_value = FactCheckResult(passed=False, issues=["X"])
        orchestrator = PipelineOrchestrator(
            run_logger=mock_run_logger, max_fact_check_retries=1, **agents
        )

        run = await orchestrator.run_pipeline("PRD")

        assert run.fact_check_passed is False
        assert agents["writer"].run.await_count == 1
        assert agents["fact_checker"].run.await_count == 1

    @pytest.mark.asyncio
    async def test_fact_checker_error_is_fatal(self, orchestrator, agents, mock_run_logger):
        """An execution error stops the run without a revision."""
        agents["fact_checker"].run.side_effect = FactCheckError("Anthropic API error: 500")

        with pytest.raises(PipelineError) as exc_info:
            await orchestrator.run_pipeline("PRD")

        assert exc_info.value.stage == PipelineStage.FACT_CHECKING
        assert str(exc_info.value) == (
            "Pipeline failed at fact-checking stage: "
            "Fact-checker agent failed: Anthropic API error: 500"
        )
        assert agents["writer"].run.await_count == 1
        agents["polisher"].run.assert_not_called()

        error_entry = logged(mock_run_logger)[-1]
        assert error_entry[0] == AgentNameEnum.FACT_CHECKER
        assert error_entry[2] == ""
        assert isinstance(error_entry[3], ErrorMetadata)
        assert error_entry[3].attempt == 1

    @pytest.mark.asyncio
    async def test_revision_error_is_fact_checking_failure(self, orchestrator, agents, mock_run_logger):
        """A failing revision aborts the fact-checking stage and is logged against the fact-checker."""
        agents["fact_checker"].run.return_value = FactCheckResult(passed=False, issues=["X"])
        agents["writer"].run.side_effect = ["DRAFT", WriterError("quota")]

        with pytest.raises(PipelineError) as exc_info:
            await orchestrator.run_pipeline("PRD")

        assert exc_info.value.stage == PipelineStage.FACT_CHECKING
        assert str(exc_info.value) == (
            "Pipeline failed at fact-checking stage: Writer agent failed: quota"
        )
        assert agents["fact_checker"].run.await_count == 1
        agents["polisher"].run.assert_not_called()

        agent, input_text, output_text, metadata = logged(mock_run_logger)[-1]
        assert agent == AgentNameEnum.FACT_CHECKER
        assert input_text == "DRAFT"
        assert output_text == ""
        assert isinstance(metadata, ErrorMetadata)
        assert metadata.error.message == "Writer agent failed: quota"
        assert metadata.attempt == 2


class TestFailFast:
    """Test that any stage failure aborts the run."""

    @pytest.mark.asyncio
    async def test_research_failure(self, orchestrator, agents, mock_run_logger):
        """Research failure: no later agent runs, one error entry is logged."""
        agents["researcher"].run.side_effect = ResearchError("No topics extracted from document")

        with pytest.raises(PipelineError) as exc_info:
            await orchestrator.run_pipeline("PRD")

        assert exc_info.value.stage == PipelineStage.RESEARCH
        assert "No topics extracted from document" in exc_info.value.message
        agents["writer"].run.assert_not_called()
        agents["fact_checker"].run.assert_not_called()
        agents["polisher"].run.assert_not_called()

        entries = logged(mock_run_logger)
        assert len(entries) == 1
        agent, input_text, output_text, metadata = entries[0]
        assert agent == AgentNameEnum.RESEARCHER
        assert input_text == "PRD"
        assert output_text == ""
        assert metadata.error.message == "Research agent failed: No topics extracted from document"
        assert metadata.attempt is None

    @pytest.mark.asyncio
    async def test_writer_failure(self, orchestrator, agents):
        """Writer failure stops before fact-checking."""
        agents["writer"].run.side_effect = WriterError("timeout")

        with pytest.raises(PipelineError) as exc_info:
            await orchestrator.run_pipeline("PRD")

        assert exc_info.value.stage == PipelineStage.WRITING
        agents["fact_checker"].run.assert_not_called()

    @pytest.mark.asyncio
    async def test_polisher_failure(self, orchestrator, agents, mock_run_logger):
        """Polisher failure reports the polishing stage; no partial result is returned."""
        agents["polisher"].run.side_effect = PolishError("boom")

        with pytest.raises(PipelineError) as exc_info:
            await orchestrator.run_pipeline("PRD")

        assert exc_info.value.stage == PipelineStage.POLISHING
        assert str(exc_info.value) == "Pipeline failed at polishing stage: Polisher agent failed: boom"
        assert logged(mock_run_logger)[-1][0] == AgentNameEnum.POLISHER

    @pytest.mark.asyncio
    async def test_log_store_failure_does_not_affect_run(self, orchestrator, mock_run_logger):
        """A raising log store leaves the run result unchanged."""
        mock_run_logger.append.side_effect = Exception("database unavailable")

        run = await orchestrator.run_pipeline("PRD")

        assert run.final_post == "FINAL"
        assert run.fact_check_passed is True


class TestEndToEnd:
    """Run real agents against mocked LLM and search clients."""

    @staticmethod
    def fake_llm(prompt, model=None):
        if prompt.startswith("You are a research assistant"):
            return "X features, X benefits"
        if prompt.startswith("You are a blog writer"):
            return "# About X\n\nX has features and benefits."
        if prompt.startswith("You are a fact-checker"):
            return "PASS"
        if prompt.startswith("You are a style editor"):
            return "# About X\n\nX has great features and benefits."
        raise AssertionError(f"Unexpected prompt: {prompt[:40]}")

    @pytest.mark.asyncio
    async def test_full_run(self, mock_llm_client, mock_search_client, mock_run_logger):
        """Topics are searched in order and the post passes through every stage."""
        mock_llm_client.generate.side_effect = self.fake_llm
        mock_search_client.search.side_effect = [["X is fast."], ["X saves time."]]

        orchestrator = PipelineOrchestrator(
            researcher=ResearcherAgent(llm_client=mock_llm_client, search_client=mock_search_client),
            writer=WriterAgent(llm_client=mock_llm_client),
            fact_checker=FactCheckerAgent(llm_client=mock_llm_client),
            polisher=PolisherAgent(llm_client=mock_llm_client),
            run_logger=mock_run_logger,
            max_fact_check_retries=2,
        )

        run = await orchestrator.run_pipeline("Product: X. Goal: explain X.")

        searched = [call.args[0] for call in mock_search_client.search.call_args_list]
        assert searched == ["X features", "X benefits"]
        assert "Topic: X features" in run.research
        assert "Topic: X benefits" in run.research
        assert run.fact_check_passed is True
        assert run.final_post == "# About X\n\nX has great features and benefits."
        assert mock_llm_client.generate.await_count == 4
        assert mock_run_logger.append.await_count == 4
