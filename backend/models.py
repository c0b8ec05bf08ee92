"""Pydantic models matching the content agent JSON contract."""
from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Any, Literal, Optional

HealthStatus = Literal["healthy", "warning", "critical"]
Severity = Literal["critical", "warning"]
Priority = Literal["high", "medium", "low"]


# ── Request models ─────────────────────────────────────────────────

class ChatMessage(BaseModel):
    role: str
    content: str = ""


class AgentContext(BaseModel):
    moduleCode: Optional[str] = None
    featureCode: Optional[str] = None
    sectionTitle: Optional[str] = None
    sectionNumber: Optional[str] = None
    sectionId: Optional[str] = None
    customInstructions: Optional[str] = None
    targetPersona: Optional[str] = None  # "ess" | "mss" | "hr" | "admin" | "all"
    targetAudience: Optional[list[str]] = None
    chatMessage: Optional[str] = None
    conversationHistory: list[ChatMessage] = Field(default_factory=list)


class AgentRequest(BaseModel):
    action: str
    context: AgentContext = Field(default_factory=AgentContext)


# ── Coverage models ────────────────────────────────────────────────

class ModuleCoverage(BaseModel):
    moduleName: str
    total: int = 0
    documented: int = 0
    gaps: int = 0
    percentage: int = 0
    priorityFeatures: list[str] = Field(default_factory=list)


class StaleEntry(BaseModel):
    feature_code: str
    lastUpdated: str
    daysSinceUpdate: int


class CoverageReport(BaseModel):
    totalFeatures: int = 0
    documented: int = 0
    undocumented: int = 0
    coveragePercentage: int = 0
    moduleBreakdown: dict[str, ModuleCoverage] = Field(default_factory=dict)
    readinessScore: int = 0
    recommendations: list[str] = Field(default_factory=list)
    staleContent: list[StaleEntry] = Field(default_factory=list)


class DocumentationHealth(BaseModel):
    orphanedReferences: int = 0
    unmappedSections: int = 0
    healthStatus: HealthStatus = "healthy"


class ManualSectionCoverage(BaseModel):
    totalModulesWithSections: int = 0
    totalSections: int = 0
    modulesWithContent: list[str] = Field(default_factory=list)


class AnalyzeContextResponse(BaseModel):
    success: bool = True
    analysis: CoverageReport
    documentationHealth: DocumentationHealth
    manualSectionCoverage: ManualSectionCoverage


# ── Consistency models ─────────────────────────────────────────────

class OrphanedReference(BaseModel):
    section_id: str
    section_number: str = ""
    section_title: str = ""
    manual_code: str = ""
    orphaned_codes: list[str] = Field(default_factory=list)
    valid_codes: list[str] = Field(default_factory=list)
    severity: Severity = "warning"
    action_required: str = "Remove invalid codes or add features to registry"


class UnmappedSection(BaseModel):
    section_id: str
    section_number: str = ""
    title: str = ""
    manual_code: str = ""


class ValidationSummary(BaseModel):
    orphanedCount: int = 0
    unmappedCount: int = 0
    healthScore: int = 0


class ValidationReport(BaseModel):
    totalSections: int = 0
    validMappings: int = 0
    orphanedDocumentation: list[OrphanedReference] = Field(default_factory=list)
    unmappedSections: list[UnmappedSection] = Field(default_factory=list)
    summary: ValidationSummary = Field(default_factory=ValidationSummary)


class ValidateDocumentationResponse(BaseModel):
    success: bool = True
    validation: ValidationReport


# ── Gap models ─────────────────────────────────────────────────────

class FeatureGap(BaseModel):
    feature_code: str
    feature_name: str = ""


class UndocumentedFeature(FeatureGap):
    module_code: str = ""
    module_name: str = ""


class ModuleGap(BaseModel):
    module_code: str
    module_name: str = ""


class GapLists(BaseModel):
    noDocumentation: list[UndocumentedFeature] = Field(default_factory=list)
    noKBArticle: list[FeatureGap] = Field(default_factory=list)
    noQuickStart: list[ModuleGap] = Field(default_factory=list)
    noSOP: list[FeatureGap] = Field(default_factory=list)
    orphanedDocumentation: list[OrphanedReference] = Field(default_factory=list)


class GapSummary(BaseModel):
    undocumentedFeatures: int = 0
    missingKBArticles: int = 0
    missingQuickStarts: int = 0
    missingSOPs: int = 0
    orphanedDocumentation: int = 0


class IdentifyGapsResponse(BaseModel):
    success: bool = True
    gaps: GapLists
    summary: GapSummary


# ── Next action models ─────────────────────────────────────────────

class NextAction(BaseModel):
    action: str
    priority: Priority
    title: str
    description: str


class NextActionStats(BaseModel):
    totalFeatures: int = 0
    documented: int = 0
    coverageRate: int = 0
    staleContent: int = 0


class SuggestNextActionsResponse(BaseModel):
    success: bool = True
    suggestions: list[NextAction] = Field(default_factory=list)
    stats: NextActionStats = Field(default_factory=NextActionStats)


# ── Bulk generation / assessment models ────────────────────────────

class BulkGenerateResponse(BaseModel):
    success: bool = True
    candidates: list[UndocumentedFeature] = Field(default_factory=list)
    totalUndocumented: int = 0


class ModuleDocumentation(BaseModel):
    total: int = 0
    documented: int = 0
    percentage: int = 0


class CoverageAssessment(BaseModel):
    totalFeatures: int = 0
    documented: int = 0
    overallCoverage: int = 0
    publishedArticles: int = 0
    publishedQuickstarts: int = 0
    moduleBreakdown: dict[str, ModuleDocumentation] = Field(default_factory=dict)
    readinessScore: int = 0


class AssessCoverageResponse(BaseModel):
    success: bool = True
    coverage: CoverageAssessment


# ── Generation models ──────────────────────────────────────────────

class ManualSectionMetadata(BaseModel):
    sectionNumber: str
    sectionTitle: str
    featureCode: str
    featureName: str = ""
    moduleCode: str = ""
    readingTime: int = 1
    wordCount: int = 0


class GenerateManualSectionResponse(BaseModel):
    success: bool = True
    content: str
    metadata: ManualSectionMetadata


class GenerateKbArticleResponse(BaseModel):
    success: bool = True
    article: dict[str, Any]
    featureCode: str
    moduleName: str = ""


class GenerateQuickstartResponse(BaseModel):
    success: bool = True
    quickstart: dict[str, Any]
    moduleCode: str


class GenerateSopResponse(BaseModel):
    success: bool = True
    sop: dict[str, Any]
    featureCode: str


class ChatResponse(BaseModel):
    success: bool = True
    reply: str
    suggestedActions: list[str] = Field(default_factory=list)


class SectionInfo(BaseModel):
    sectionNumber: str = ""
    title: str = ""
    lastGeneratedAt: Optional[str] = None
    currentVersion: str = "1.0"


class SectionRegenerationPreview(BaseModel):
    success: bool = True
    currentContent: str = ""
    proposedContent: str = ""
    sectionInfo: SectionInfo = Field(default_factory=SectionInfo)
