"""Content agent service: coverage analysis, consistency checks and AI-backed generation.

Every call is request-scoped. Reads run sequentially against the catalogue,
derived collections are built fresh, and any failed read aborts the call;
there is no partial report.
"""
from __future__ import annotations

import json
import logging
import math
from datetime import date, datetime
from typing import Any, Awaitable, Callable

from backend import config
from backend.coverage import compute_coverage, js_round
from backend.date_utils import timestamp_text
from backend.db.factory import (
    get_catalog_repository,
    get_content_repository,
    get_manual_repository,
)
from backend.errors import InvalidRequestError, NotFoundError
from backend.gap_analysis import (
    BULK_BATCH_LIMIT,
    BULK_MODULE_BATCH_LIMIT,
    KB_ARTICLE,
    PUBLISHED,
    assess_coverage,
    bulk_candidates,
    count_final_documentation,
    count_stale,
    coverage_rate,
    find_gaps,
    suggest_next_actions,
)
from backend.models import (
    AgentContext,
    AgentRequest,
    AnalyzeContextResponse,
    AssessCoverageResponse,
    BulkGenerateResponse,
    ChatResponse,
    DocumentationHealth,
    GenerateKbArticleResponse,
    GenerateManualSectionResponse,
    GenerateQuickstartResponse,
    GenerateSopResponse,
    IdentifyGapsResponse,
    ManualSectionCoverage,
    ManualSectionMetadata,
    NextActionStats,
    SectionInfo,
    SectionRegenerationPreview,
    SuggestNextActionsResponse,
    ValidateDocumentationResponse,
    ValidationReport,
    ValidationSummary,
)
from backend.orphan_check import check_sections, health_score, health_status
from backend.services import agent_prompts
from backend.services.ai_gateway import (
    AIGateway,
    extract_json_object,
    extract_suggested_actions,
    get_ai_gateway,
)
from backend.services.content_snapshot import (
    index_status_by_feature,
    load_content_snapshot,
    load_feature_registry,
)

logger = logging.getLogger("docready.agent")

WORDS_PER_MINUTE = 200
CHAT_FEATURE_SAMPLE = 50
CHAT_FEATURE_NAMES = 10
NO_CHAT_REPLY = "I apologize, I couldn't generate a response."

AGENT_ACTIONS = frozenset(
    {
        "analyze_context",
        "identify_gaps",
        "validate_documentation",
        "suggest_next_actions",
        "assess_coverage",
        "bulk_generate",
        "generate_manual_section",
        "generate_kb_article",
        "generate_quickstart",
        "generate_sop",
        "chat",
        "preview_section_regeneration",
    }
)


def _require(value: str | None, field_name: str) -> str:
    if not value:
        raise InvalidRequestError(f"{field_name} is required")
    return value


def reading_time_minutes(content: str) -> tuple[int, int]:
    word_count = len(content.split())
    return max(1, math.ceil(word_count / WORDS_PER_MINUTE)), word_count


def section_markdown(content: Any) -> str:
    if not content:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, dict):
        if isinstance(content.get("markdown"), str):
            return content["markdown"]
        if isinstance(content.get("content"), str):
            return content["content"]
    return json.dumps(content, indent=2)


class ContentAgentService:
    def __init__(self, db: Any, gateway: AIGateway | None = None):
        self.db = db
        self._gateway = gateway
        self.catalog = get_catalog_repository(db)
        self.content = get_content_repository(db)
        self.manuals = get_manual_repository(db)

    @property
    def gateway(self) -> AIGateway:
        if self._gateway is None:
            self._gateway = get_ai_gateway()
        return self._gateway

    async def run(self, request: AgentRequest) -> Any:
        handlers: dict[str, Callable[[AgentContext], Awaitable[Any]]] = {
            "analyze_context": lambda ctx: self.analyze_context(ctx.moduleCode),
            "identify_gaps": lambda ctx: self.identify_gaps(ctx.moduleCode),
            "validate_documentation": lambda ctx: self.validate_documentation(),
            "suggest_next_actions": lambda ctx: self.suggest_next_actions(),
            "assess_coverage": lambda ctx: self.assess_coverage(),
            "bulk_generate": lambda ctx: self.bulk_generate(ctx.moduleCode),
            "generate_manual_section": self.generate_manual_section,
            "generate_kb_article": self.generate_kb_article,
            "generate_quickstart": self.generate_quickstart,
            "generate_sop": self.generate_sop,
            "chat": self.chat,
            "preview_section_regeneration": self.preview_section_regeneration,
        }
        handler = handlers.get(request.action)
        if handler is None:
            raise InvalidRequestError(f"Unknown action: {request.action}")
        return await handler(request.context)

    # ── Analysis ───────────────────────────────────────────────────

    async def _valid_feature_codes(self, features: list[dict], module_code: str | None) -> set[str]:
        # Orphan checks always compare against the whole active registry.
        registry = await load_feature_registry(self.db) if module_code else features
        return {str(f["feature_code"]) for f in registry if f.get("feature_code")}

    async def analyze_context(
        self,
        module_code: str | None = None,
        now: datetime | None = None,
    ) -> AnalyzeContextResponse:
        features = await load_feature_registry(self.db, module_code)
        snapshot = await load_content_snapshot(self.db)

        analysis = compute_coverage(
            features,
            snapshot.status_by_code,
            snapshot.artifact_types_by_code,
            snapshot.module_section_set,
            now,
        )

        consistency = check_sections(snapshot.sections, await self._valid_feature_codes(features, module_code))
        health = DocumentationHealth(
            orphanedReferences=consistency.orphaned_count,
            unmappedSections=consistency.unmapped_count,
            healthStatus=health_status(consistency.orphaned_count, consistency.unmapped_count),
        )
        logger.info(
            "Coverage analysed: %s features, %s%% covered, readiness %s, health %s",
            analysis.totalFeatures,
            analysis.coveragePercentage,
            analysis.readinessScore,
            health.healthStatus,
        )
        return AnalyzeContextResponse(
            analysis=analysis,
            documentationHealth=health,
            manualSectionCoverage=ManualSectionCoverage(
                totalModulesWithSections=len(snapshot.modules_with_sections),
                totalSections=snapshot.module_linked_section_count,
                modulesWithContent=list(snapshot.modules_with_sections),
            ),
        )

    async def identify_gaps(self, module_code: str | None = None) -> IdentifyGapsResponse:
        features = await load_feature_registry(self.db, module_code)
        snapshot = await load_content_snapshot(self.db)
        modules = await self.catalog.list_active_modules()
        quickstart_modules = await self.content.list_quickstart_module_codes()

        consistency = check_sections(snapshot.sections, await self._valid_feature_codes(features, module_code))
        gaps, summary = find_gaps(
            features,
            snapshot.status_by_code,
            snapshot.artifact_types_by_code,
            modules,
            quickstart_modules,
            consistency.orphaned,
        )
        return IdentifyGapsResponse(gaps=gaps, summary=summary)

    async def validate_documentation(self) -> ValidateDocumentationResponse:
        features = await load_feature_registry(self.db)
        sections = await self.manuals.list_sections()

        valid_codes = {str(f["feature_code"]) for f in features if f.get("feature_code")}
        consistency = check_sections(sections, valid_codes)
        limit = config.LIST_RESPONSE_LIMIT
        valid_count = len(consistency.valid_mappings)

        return ValidateDocumentationResponse(
            validation=ValidationReport(
                totalSections=consistency.total_sections,
                validMappings=valid_count,
                orphanedDocumentation=consistency.orphaned[:limit],
                unmappedSections=consistency.unmapped[:limit],
                summary=ValidationSummary(
                    orphanedCount=consistency.orphaned_count,
                    unmappedCount=consistency.unmapped_count,
                    healthScore=health_score(consistency.orphaned_count, consistency.unmapped_count, valid_count),
                ),
            )
        )

    async def suggest_next_actions(self, now: datetime | None = None) -> SuggestNextActionsResponse:
        features = await load_feature_registry(self.db)
        status_rows = await self.content.list_content_status()

        total_features = len(features)
        documented = count_final_documentation(status_rows)
        stale_count = count_stale(status_rows, now)
        return SuggestNextActionsResponse(
            suggestions=suggest_next_actions(total_features, documented, stale_count),
            stats=NextActionStats(
                totalFeatures=total_features,
                documented=documented,
                coverageRate=js_round(coverage_rate(total_features, documented)),
                staleContent=stale_count,
            ),
        )

    async def assess_coverage(self) -> AssessCoverageResponse:
        features = await load_feature_registry(self.db)
        status_rows = await self.content.list_content_status()
        artifacts = await self.content.list_artifacts()
        quickstarts = await self.content.list_quickstart_templates()

        published_articles = sum(
            1 for a in artifacts if a.get("artifact_type") == KB_ARTICLE and a.get("status") == PUBLISHED
        )
        published_quickstarts = sum(1 for q in quickstarts if q.get("status") == PUBLISHED)
        coverage = assess_coverage(
            features,
            status_rows,
            index_status_by_feature(status_rows),
            published_articles,
            published_quickstarts,
        )
        return AssessCoverageResponse(coverage=coverage)

    async def bulk_generate(self, module_code: str | None = None) -> BulkGenerateResponse:
        """List generation candidates: active features nobody has started tracking yet."""
        features = await load_feature_registry(self.db, module_code)
        status_rows = await self.content.list_content_status()

        status_codes = {str(row["feature_code"]) for row in status_rows if row.get("feature_code")}
        limit = BULK_MODULE_BATCH_LIMIT if module_code else BULK_BATCH_LIMIT
        candidates, total = bulk_candidates(features, status_codes, limit=limit)
        return BulkGenerateResponse(candidates=candidates, totalUndocumented=total)

    # ── Generation ─────────────────────────────────────────────────

    async def _feature_context(self, feature_code: str) -> dict[str, Any]:
        feature = await self.catalog.get_feature(feature_code)
        if not feature:
            raise NotFoundError("Feature not found")
        feature["existing_artifacts"] = await self.content.list_feature_artifacts(feature_code, limit=5)
        feature["content_status"] = await self.content.get_content_status(feature_code)
        return feature

    async def generate_manual_section(self, ctx: AgentContext) -> GenerateManualSectionResponse:
        feature = await self._feature_context(_require(ctx.featureCode, "featureCode"))
        section_title = ctx.sectionTitle or str(feature.get("feature_name") or "")
        section_number = ctx.sectionNumber or "X.Y"
        audiences = ctx.targetAudience or agent_prompts.DEFAULT_AUDIENCES

        prompt = agent_prompts.manual_section_prompt(
            feature, section_number, section_title, audiences, len(feature["existing_artifacts"])
        )
        content = await self.gateway.complete(agent_prompts.AGENT_SYSTEM_PROMPT, prompt)
        reading_time, word_count = reading_time_minutes(content)

        return GenerateManualSectionResponse(
            content=content,
            metadata=ManualSectionMetadata(
                sectionNumber=section_number,
                sectionTitle=section_title,
                featureCode=str(feature.get("feature_code") or ""),
                featureName=str(feature.get("feature_name") or ""),
                moduleCode=str(feature.get("module_code") or ""),
                readingTime=reading_time,
                wordCount=word_count,
            ),
        )

    async def generate_kb_article(self, ctx: AgentContext) -> GenerateKbArticleResponse:
        feature = await self._feature_context(_require(ctx.featureCode, "featureCode"))
        persona = ctx.targetPersona or "all"

        content = await self.gateway.complete(
            agent_prompts.AGENT_SYSTEM_PROMPT, agent_prompts.kb_article_prompt(feature, persona)
        )
        article = extract_json_object(content)
        if article is None:
            logger.warning("KB article reply for %s was not JSON; returning raw content", feature.get("feature_code"))
            article = {
                "title": feature.get("feature_name", ""),
                "content": content,
                "summary": "",
                "keywords": [],
                "persona": persona,
            }
        return GenerateKbArticleResponse(
            article=article,
            featureCode=str(feature.get("feature_code") or ""),
            moduleName=str(feature.get("module_name") or ""),
        )

    async def generate_quickstart(self, ctx: AgentContext) -> GenerateQuickstartResponse:
        module = await self.catalog.get_module(_require(ctx.moduleCode, "moduleCode"))
        if not module:
            raise NotFoundError("Module not found")
        features = await self.catalog.list_module_features(module["id"])

        content = await self.gateway.complete(
            agent_prompts.AGENT_SYSTEM_PROMPT, agent_prompts.quickstart_prompt(module, features)
        )
        quickstart = extract_json_object(content)
        if quickstart is None:
            logger.warning("Quick start reply for %s was not JSON; returning raw content", module.get("module_code"))
            quickstart = {
                "moduleName": module.get("module_name", ""),
                "moduleCode": module.get("module_code", ""),
                "rawContent": content,
            }
        return GenerateQuickstartResponse(quickstart=quickstart, moduleCode=str(module.get("module_code") or ""))

    async def generate_sop(self, ctx: AgentContext) -> GenerateSopResponse:
        feature = await self._feature_context(_require(ctx.featureCode, "featureCode"))

        content = await self.gateway.complete(
            agent_prompts.AGENT_SYSTEM_PROMPT,
            agent_prompts.sop_prompt(feature, date.today().isoformat()),
        )
        sop = extract_json_object(content)
        if sop is None:
            logger.warning("SOP reply for %s was not JSON; returning raw content", feature.get("feature_code"))
            sop = {"title": f"SOP: {feature.get('feature_name', '')}", "rawContent": content}
        return GenerateSopResponse(sop=sop, featureCode=str(feature.get("feature_code") or ""))

    async def chat(self, ctx: AgentContext) -> ChatResponse:
        message = _require(ctx.chatMessage, "chatMessage")
        features = (await self.catalog.list_active_features())[:CHAT_FEATURE_SAMPLE]
        modules = await self.catalog.list_active_modules()

        messages = [{"role": "system", "content": agent_prompts.chat_system_prompt(modules, features[:CHAT_FEATURE_NAMES])}]
        messages.extend({"role": m.role, "content": m.content} for m in ctx.conversationHistory)
        messages.append({"role": "user", "content": message})

        reply = await self.gateway.chat(messages) or NO_CHAT_REPLY
        return ChatResponse(reply=reply, suggestedActions=extract_suggested_actions(reply))

    async def preview_section_regeneration(self, ctx: AgentContext) -> SectionRegenerationPreview:
        section = await self.manuals.get_section(_require(ctx.sectionId, "sectionId"))
        if not section:
            raise NotFoundError("Section not found")

        current_content = section_markdown(section.get("content"))
        feature_codes = section.get("source_feature_codes") or []
        features = await self.catalog.list_features_by_codes(feature_codes)
        manual_name = str(section.get("manual_name") or "Administrator Manual")

        prompt = agent_prompts.section_regeneration_prompt(
            section,
            manual_name,
            agent_prompts.feature_context_block(features),
            current_content,
            ctx.customInstructions,
        )
        proposed = await self.gateway.complete(agent_prompts.AGENT_SYSTEM_PROMPT, prompt)
        last_generated = section.get("last_generated_at")

        return SectionRegenerationPreview(
            currentContent=current_content,
            proposedContent=proposed,
            sectionInfo=SectionInfo(
                sectionNumber=str(section.get("section_number") or ""),
                title=str(section.get("title") or ""),
                lastGeneratedAt=timestamp_text(last_generated) if last_generated else None,
                currentVersion=str(section.get("current_version") or "1.0"),
            ),
        )
