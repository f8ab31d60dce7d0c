"""
Pipeline Orchestrator for the content pipeline.

Coordinates sequential execution of 4 agents:
1. ResearcherAgent
2. WriterAgent
3. FactCheckerAgent (with bounded revise/re-check loop)
4. PolisherAgent

Implements fail-fast behavior: any agent failure stops the pipeline
immediately and no partial result is returned. The one exception is a failed
fact-check verdict, which triggers a writer revision until the attempt limit
is reached. Every agent invocation is appended to the run's execution log.
"""

import enum
import json
import logging
import uuid
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from content_pipeline.agents.fact_checker import FactCheckerAgent, FactCheckResult
from content_pipeline.agents.polisher import PolisherAgent
from content_pipeline.agents.researcher import ResearcherAgent
from content_pipeline.agents.writer import WriterAgent, revision_feedback, revision_research
from content_pipeline.config import settings
from content_pipeline.database.models import AgentNameEnum
from content_pipeline.schemas import (
    FactCheckAttemptMetadata,
    LogMetadata,
    RevisionMetadata,
    RunResult,
    WarningDetail,
    WarningMetadata,
    error_metadata,
)
from content_pipeline.services.llm_client import LLMClient
from content_pipeline.services.run_logger import RunLogger
from content_pipeline.services.web_search import WebSearchClient

logger = logging.getLogger(__name__)


class PipelineStage(str, enum.Enum):
    """Stages of the pipeline, in execution order."""
    RESEARCH = "research"
    WRITING = "writing"
    FACT_CHECKING = "fact-checking"
    POLISHING = "polishing"


class PipelineError(Exception):
    """Raised when pipeline execution fails; identifies the failing stage."""

    def __init__(self, stage: PipelineStage, message: str):
        self.stage = stage
        self.message = message
        super().__init__(f"Pipeline failed at {stage.value} stage: {message}")


@dataclass
class PipelineRun:
    """
    State of a single pipeline run.

    Owned and mutated only by the orchestrator. research is set once;
    draft may be replaced by revisions; fact_check_passed reflects the
    last fact-check attempt.
    """
    run_id: UUID
    document: str
    research: Optional[str] = None
    draft: Optional[str] = None
    fact_check_passed: bool = False
    final_post: Optional[str] = None

    def to_result(self) -> RunResult:
        """Build the caller-facing result of a completed run."""
        return RunResult(
            run_id=self.run_id,
            research=self.research or "",
            draft=self.draft or "",
            fact_check_passed=self.fact_check_passed,
            final_post=self.final_post or "",
        )


class PipelineOrchestrator:
    """
    Orchestrates the 4-agent pipeline for blog post generation.

    Each agent receives output from the previous one. Collaborators can be
    injected; by default they are built from settings and share one LLM client.
    """

    def __init__(
        self,
        researcher: Optional[ResearcherAgent] = None,
        writer: Optional[WriterAgent] = None,
        fact_checker: Optional[FactCheckerAgent] = None,
        polisher: Optional[PolisherAgent] = None,
        run_logger: Optional[RunLogger] = None,
        max_fact_check_retries: Optional[int] = None,
    ):
        """
        Initialize pipeline orchestrator.

        Args:
            researcher: Researcher agent
            writer: Writer agent (also used for revisions)
            fact_checker: Fact-checker agent
            polisher: Polisher agent
            run_logger: Execution log appender
            max_fact_check_retries: Total fact-check attempts allowed per run
        """
        llm_client = None
        if not all([researcher, writer, fact_checker, polisher]):
            llm_client = LLMClient()

        self.researcher = researcher or ResearcherAgent(
            llm_client=llm_client, search_client=WebSearchClient()
        )
        self.writer = writer or WriterAgent(llm_client=llm_client)
        self.fact_checker = fact_checker or FactCheckerAgent(llm_client=llm_client)
        self.polisher = polisher or PolisherAgent(llm_client=llm_client)
        self.run_logger = run_logger or RunLogger()
        self.max_fact_check_retries = (
            max_fact_check_retries
            if max_fact_check_retries is not None
            else settings.MAX_FACT_CHECK_RETRIES
        )

    async def _log(
        self,
        run: PipelineRun,
        agent: AgentNameEnum,
        input_text: str,
        output_text: str,
        metadata: Optional[LogMetadata] = None,
    ) -> None:
        """Append to the execution log; never lets a log failure reach the pipeline."""
        try:
            await self.run_logger.append(run.run_id, agent, input_text, output_text, metadata)
        except Exception as e:
            logger.warning("[Pipeline %s] Failed to log %s action: %s", run.run_id, agent.value, e)

    async def _fail(
        self,
        run: PipelineRun,
        stage: PipelineStage,
        agent: AgentNameEnum,
        input_text: str,
        error: Exception,
        attempt: Optional[int] = None,
    ) -> PipelineError:
        """Log a failed agent invocation and build the stage-labelled error."""
        logger.error("[Pipeline %s] %s failed: %s", run.run_id, agent.value, error)
        await self._log(run, agent, input_text, "", error_metadata(str(error), attempt=attempt))
        return PipelineError(stage, str(error))

    def _writer_input(self, run: PipelineRun, feedback: Optional[str] = None) -> str:
        payload = {"prd": run.document, "research": run.research}
        if feedback is not None:
            payload["revisionFeedback"] = feedback
        return json.dumps(payload)

    async def run_pipeline(self, document: str) -> PipelineRun:
        """
        Run the complete pipeline on a requirements document.

        Args:
            document: Product requirements document text

        Returns:
            Fully populated PipelineRun

        Raises:
            PipelineError: If any stage fails; stage identifies which one
        """
        run = PipelineRun(run_id=uuid.uuid4(), document=document)
        logger.info("[Pipeline %s] Starting content generation pipeline", run.run_id)

        await self._run_researcher(run)
        await self._run_writer(run)
        await self._run_fact_check_loop(run)
        await self._run_polisher(run)

        logger.info("[Pipeline %s] Pipeline completed successfully", run.run_id)
        return run

    async def _run_researcher(self, run: PipelineRun) -> None:
        logger.info("[Pipeline %s] Running researcher...", run.run_id)
        try:
            research = await self.researcher.run(run.document)
        except Exception as e:
            raise await self._fail(
                run, PipelineStage.RESEARCH, AgentNameEnum.RESEARCHER, run.document, e
            ) from e

        run.research = research
        await self._log(run, AgentNameEnum.RESEARCHER, run.document, research)
        logger.info("[Pipeline %s] Research completed", run.run_id)

    async def _run_writer(self, run: PipelineRun) -> None:
        logger.info("[Pipeline %s] Running writer...", run.run_id)
        writer_input = self._writer_input(run)
        try:
            draft = await self.writer.run(run.document, run.research)
        except Exception as e:
            raise await self._fail(
                run, PipelineStage.WRITING, AgentNameEnum.WRITER, writer_input, e
            ) from e

        run.draft = draft
        await self._log(run, AgentNameEnum.WRITER, writer_input, draft)
        logger.info("[Pipeline %s] Initial draft completed", run.run_id)

    async def _run_revision(self, run: PipelineRun, result: FactCheckResult, attempt: int) -> None:
        """
        Rewrite the draft with fact-check feedback; attempt is the upcoming check.

        A failing revision belongs to the fact-check loop: it is logged against
        the fact-checker with the attempt number and aborts the fact-checking stage.
        """
        logger.info("[Pipeline %s] Revising draft to address fact-check issues...", run.run_id)
        feedback = revision_feedback(result.issues)
        writer_input = self._writer_input(run, feedback=feedback)
        try:
            revised = await self.writer.run(run.document, revision_research(run.research, feedback))
        except Exception as e:
            raise await self._fail(
                run, PipelineStage.FACT_CHECKING, AgentNameEnum.FACT_CHECKER,
                run.draft, e, attempt=attempt,
            ) from e

        run.draft = revised
        await self._log(
            run, AgentNameEnum.WRITER, writer_input, revised,
            RevisionMetadata(attempt=attempt),
        )
        logger.info("[Pipeline %s] Draft revised (attempt %d)", run.run_id, attempt)

    async def _run_fact_check_loop(self, run: PipelineRun) -> None:
        """
        Fact-check the draft, revising on a failed verdict.

        A failed verdict triggers a revision while attempts remain; once they
        are exhausted the pipeline proceeds with fact_check_passed False.
        An execution error is fatal and never retried.
        """
        attempt = 0
        passed = False

        while attempt < self.max_fact_check_retries and not passed:
            logger.info(
                "[Pipeline %s] Running fact-checker (attempt %d/%d)...",
                run.run_id, attempt + 1, self.max_fact_check_retries,
            )
            try:
                result = await self.fact_checker.run(run.draft, run.research)
            except Exception as e:
                raise await self._fail(
                    run, PipelineStage.FACT_CHECKING, AgentNameEnum.FACT_CHECKER,
                    run.draft, e, attempt=attempt + 1,
                ) from e

            await self._log(
                run, AgentNameEnum.FACT_CHECKER, run.draft, json.dumps(result.to_dict()),
                FactCheckAttemptMetadata(
                    attempt=attempt + 1, passed=result.passed, issues=result.issues
                ),
            )

            if result.passed:
                logger.info("[Pipeline %s] Fact-check passed", run.run_id)
                run.fact_check_passed = True
                passed = True
                continue

            logger.warning(
                "[Pipeline %s] Fact-check failed. Issues found: %s", run.run_id, result.issues
            )
            attempt += 1

            if attempt < self.max_fact_check_retries:
                await self._run_revision(run, result, attempt + 1)
            else:
                logger.warning(
                    "[Pipeline %s] Max fact-check retries reached. Proceeding with current draft.",
                    run.run_id,
                )
                run.fact_check_passed = False
                await self._log(
                    run, AgentNameEnum.FACT_CHECKER, run.draft, "Max retries reached",
                    WarningMetadata(
                        warning=WarningDetail(
                            message="Proceeding despite fact-check failures",
                            final_issues=result.issues,
                        )
                    ),
                )

    async def _run_polisher(self, run: PipelineRun) -> None:
        logger.info("[Pipeline %s] Running polisher...", run.run_id)
        try:
            final_post = await self.polisher.run(run.draft)
        except Exception as e:
            raise await self._fail(
                run, PipelineStage.POLISHING, AgentNameEnum.POLISHER, run.draft, e
            ) from e

        run.final_post = final_post
        await self._log(run, AgentNameEnum.POLISHER, run.draft, final_post)
        logger.info("[Pipeline %s] Content polished and finalized", run.run_id)
