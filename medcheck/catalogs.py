"""
Signal Catalogs — Static Weighted Pattern Tables

What counts as a signal lives here and only here. The analyzers
(scanner, intent, audience, context) hold the matching logic; this
module holds the data they match against.

Every table is a module-level tuple of frozen dataclasses, loaded once
at import and never mutated. Order is significant wherever a table is
evaluated first-match-wins (disclaimers, document types, violation-type
lookup).

All patterns are Python `re` syntax and are matched with IGNORECASE.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from medcheck.models import DocumentType, ViolationType

FLAGS = re.IGNORECASE


# ============================================================
# DATA STRUCTURES
# ============================================================

@dataclass(frozen=True)
class SignalPattern:
    """A weighted signal. Weight may be negative (mitigating signals)."""
    pattern: str
    label: str
    weight: float = 0.0

    def search(self, text: str) -> Optional[re.Match]:
        return re.search(self.pattern, text, FLAGS)


@dataclass(frozen=True)
class AmbiguousPattern:
    """A phrase the deterministic rule engine may miss."""
    pattern: str
    category: str
    description: str
    examples: tuple[str, ...] = ()


@dataclass(frozen=True)
class VulnerableGroupPattern:
    pattern: str
    group: str
    risk: str


@dataclass(frozen=True)
class DocumentTypeRule:
    """
    One step of the document-type priority chain.

    kind:
      "signal"  — value is a signal label that must have fired
      "intent"  — value is a minimum advertising-intent probability
      "text"    — value is a regex evaluated against the whole text
    """
    kind: str
    value: object
    document_type: DocumentType


# ============================================================
# AMBIGUOUS EXPRESSIONS
# ============================================================

AMBIGUOUS_PATTERNS: tuple[AmbiguousPattern, ...] = (
    AmbiguousPattern(
        pattern=r"많은\s*(?:분들?이?|환자들?이?|고객들?이?)\s*(?:효과|만족|개선)",
        category="암시적 효과 보장",
        description="통계적 근거 없이 다수의 효과를 암시",
        examples=("많은 분들이 효과를 보셨습니다", "많은 환자들이 만족하셨습니다"),
    ),
    AmbiguousPattern(
        pattern=r"자연스러운?\s*(?:결과|효과|변화|모습)",
        category="애매한 효과 표현",
        description="자연스러움을 강조하는 표현 (맥락에 따라 다름)",
        examples=("자연스러운 결과를 약속합니다", "자연스러운 변화"),
    ),
    AmbiguousPattern(
        pattern=r"(?:대부분|거의\s*모든?)\s*(?:환자|분들?|고객)",
        category="과장된 통계 표현",
        description="구체적 수치 없이 대부분을 언급",
        examples=("대부분의 환자들이", "거의 모든 분들이"),
    ),
    AmbiguousPattern(
        pattern=r"(?:놀라운?|놀랍게?|신기하게?|기적적으?로?)\s*(?:효과|결과|변화)",
        category="과장 표현",
        description="과장된 감탄 표현",
        examples=("놀라운 효과", "기적적인 변화"),
    ),
    AmbiguousPattern(
        pattern=r"(?:안전한?|안심하?\s*(?:하세요|됩니다)|걱정\s*(?:없|마세요))",
        category="안전성 과장",
        description="안전성을 무조건적으로 강조",
        examples=("완전히 안전합니다", "부작용 걱정 마세요"),
    ),
    AmbiguousPattern(
        pattern=r"(?:빠른|신속한?|즉각적인?)\s*(?:효과|회복|개선|결과)",
        category="속도 과장",
        description="빠른 효과를 강조",
        examples=("빠른 효과를 경험하세요", "즉각적인 개선"),
    ),
    AmbiguousPattern(
        pattern=r"(?:오랜|풍부한?|수많은?)\s*(?:경험|노하우|실력)",
        category="경험 강조",
        description="경험을 과장 (맥락에 따라 다름)",
        examples=("오랜 경험의 의료진", "수많은 시술 경험"),
    ),
    AmbiguousPattern(
        pattern=r"(?:특별한?|차별화된?|남다른?)\s*(?:기술|방법|비법|노하우)",
        category="차별화 강조",
        description="특별함 강조 (비교광고 가능성)",
        examples=("특별한 기술로", "차별화된 방법"),
    ),
    AmbiguousPattern(
        pattern=r"(?:전문|최신|첨단)\s*(?:장비|시설|기술)",
        category="시설 강조",
        description="시설/장비 강조 (맥락에 따라 다름)",
        examples=("최신 장비 보유", "첨단 기술 적용"),
    ),
    AmbiguousPattern(
        pattern=r"(?:평생|영구적?|반영구적?)\s*(?:효과|유지|보장)",
        category="지속성 과장",
        description="효과의 영구성 강조",
        examples=("평생 유지됩니다", "반영구적 효과"),
    ),
    AmbiguousPattern(
        pattern=r"(?:확실한?|틀림없는?|분명한?)\s*(?:효과|결과|변화)",
        category="확정적 효과 표현",
        description="효과를 확정적으로 표현",
        examples=("확실한 효과", "틀림없는 결과"),
    ),
    AmbiguousPattern(
        pattern=r"(?:검증된?|입증된?|증명된?)\s*(?:효과|기술|방법)",
        category="검증 주장",
        description="검증/입증을 주장 (근거 필요)",
        examples=("검증된 효과", "입증된 기술"),
    ),
    AmbiguousPattern(
        pattern=r"(?:유명|인기|인지도)\s*(?:높은|좋은|있는)",
        category="인기 주장",
        description="유명세/인기 강조",
        examples=("유명한 병원", "인기 있는 시술"),
    ),
    AmbiguousPattern(
        pattern=r"(?:만족도|재방문율|추천율)\s*(?:\d+)?\s*%",
        category="통계 주장",
        description="통계적 수치 제시 (근거 필요)",
        examples=("만족도 98%", "재방문율 90%"),
    ),
    AmbiguousPattern(
        pattern=r"(?:부담\s*없이?|저렴한?|합리적인?)\s*(?:가격|비용|금액)",
        category="가격 유인",
        description="가격적 매력 강조",
        examples=("부담 없는 가격", "합리적인 비용"),
    ),
    AmbiguousPattern(
        pattern=r"(?:믿을\s*수\s*있는|신뢰할\s*수\s*있는|안심\s*할\s*수\s*있는)",
        category="신뢰성 강조",
        description="무조건적 신뢰 강조",
        examples=("믿을 수 있는 병원", "신뢰할 수 있는 의료진"),
    ),
    AmbiguousPattern(
        pattern=r"(?:통증\s*없이?|무통|아프지\s*않)",
        category="무통 주장",
        description="통증 없음을 단정 (맥락에 따라)",
        examples=("통증 없이 시술", "무통 수술"),
    ),
    AmbiguousPattern(
        pattern=r"(?:회복\s*기간\s*(?:없|짧|단축)|당일\s*퇴원|바로\s*일상)",
        category="회복 기간 주장",
        description="빠른 회복을 강조",
        examples=("회복 기간 없이", "당일 퇴원 가능"),
    ),
)


# ============================================================
# ADVERTISING INTENT
# ============================================================

ADVERTISING_SIGNALS: tuple[SignalPattern, ...] = (
    # Call to action
    SignalPattern(r"지금\s*(?:바로|즉시)\s*(?:상담|예약|문의)", "call_to_action_urgent", 0.2),
    SignalPattern(r"(?:상담|예약)\s*(?:받으세요|하세요|문의)", "call_to_action", 0.15),
    SignalPattern(r"(?:전화|카톡|카카오)\s*(?:주세요|문의)", "contact_request", 0.1),
    SignalPattern(r"(?:클릭|눌러|터치)\s*(?:하세요|주세요)", "click_action", 0.1),

    # Urgency
    SignalPattern(r"(?:오늘|이번\s*주|이번\s*달)\s*(?:만|까지|한정)", "urgency_time", 0.2),
    SignalPattern(r"(?:선착순|마감\s*임박|곧\s*종료)", "urgency_scarcity", 0.2),
    SignalPattern(r"(?:한정|특별)\s*(?:할인|이벤트|행사)", "limited_offer", 0.15),

    # Price / promotion
    SignalPattern(r"\d+\s*%\s*(?:할인|세일|DC)", "discount_percentage", 0.15),
    SignalPattern(r"(?:무료|공짜|0원)\s*(?:상담|진료|체험)", "free_offer", 0.2),
    SignalPattern(r"\d+,?\d*\s*(?:원|만원)", "price_mention", 0.1),
    SignalPattern(r"(?:이벤트|프로모션|특가)", "promotion", 0.15),

    # Contact details
    SignalPattern(r"\d{2,4}[-.\s]?\d{3,4}[-.\s]?\d{4}", "phone_number", 0.1),
    SignalPattern(r"(?:카카오톡?|카톡)\s*:?\s*\S+", "kakao_contact", 0.1),

    # Clinic advertising specifics
    SignalPattern(r"(?:병원|클리닉|의원)\s*(?:소개|안내)", "medical_intro", 0.1),
    SignalPattern(r"(?:시술|수술|치료)\s*(?:전|후)\s*(?:사진|이미지)", "before_after_reference", 0.15),
)

NON_ADVERTISING_SIGNALS: tuple[SignalPattern, ...] = (
    SignalPattern(r"의료법\s*(?:제?\d+조|에\s*따라|에\s*의거)", "legal_reference", -0.2),
    SignalPattern(r"(?:연구|논문|학회)\s*(?:결과|발표|보고)", "research_reference", -0.15),
    SignalPattern(r"(?:주의사항|부작용|이상반응)\s*안내", "warning_notice", -0.15),
    SignalPattern(r"(?:개인\s*차이|결과가\s*다를|보장하지\s*않)", "disclaimer", -0.2),
    SignalPattern(r"(?:교육|설명|안내)\s*(?:자료|목적)", "educational_purpose", -0.15),
    SignalPattern(r"(?:기자|뉴스|보도|언론)", "news_article", -0.15),
)

# Flag name → substrings of fired signal labels that set it
INTENT_FLAG_KEYWORDS: dict[str, tuple[str, ...]] = {
    "has_call_to_action": ("call_to_action", "click_action"),
    "has_urgency": ("urgency",),
    "has_price_info": ("discount", "price", "free_offer"),
    "has_contact_info": ("phone", "kakao", "contact"),
    "has_promotional_elements": ("promotion", "limited", "offer"),
}

ADVERTISEMENT_INTENT_THRESHOLD = 0.5

# Evaluated top to bottom, first match wins
DOCUMENT_TYPE_RULES: tuple[DocumentTypeRule, ...] = (
    DocumentTypeRule("signal", "legal_reference", DocumentType.REGULATION),
    DocumentTypeRule("signal", "news_article", DocumentType.NEWS),
    DocumentTypeRule("signal", "educational_purpose", DocumentType.EDUCATION),
    DocumentTypeRule("signal", "research_reference", DocumentType.INFORMATION),
    DocumentTypeRule("intent", ADVERTISEMENT_INTENT_THRESHOLD, DocumentType.ADVERTISEMENT),
    DocumentTypeRule("text", r"(?:Q\s*[.:]|질문\s*[.:]|자주\s*묻는|FAQ)", DocumentType.FAQ),
    DocumentTypeRule("text", r"(?:후기|리뷰|경험담|체험기)", DocumentType.REVIEW),
    DocumentTypeRule("text", r"(?:안내|설명|소개|정보)", DocumentType.INFORMATION),
)


# ============================================================
# TARGET AUDIENCE
# ============================================================

AGE_SIGNALS: tuple[SignalPattern, ...] = (
    SignalPattern(r"(?:20대|이십대|젊은)", "20대"),
    SignalPattern(r"(?:30대|삼십대)", "30대"),
    SignalPattern(r"(?:40대|사십대|중년)", "40대"),
    SignalPattern(r"(?:50대|오십대)", "50대"),
    SignalPattern(r"(?:60대|육십대|시니어|실버)", "60대+"),
    SignalPattern(r"(?:청소년|10대|십대)", "10대"),
)

GENDER_SIGNALS: tuple[SignalPattern, ...] = (
    SignalPattern(r"(?:남성|남자|남성분|아버지|아빠)", "남성"),
    SignalPattern(r"(?:여성|여자|여성분|어머니|엄마|주부)", "여성"),
)

CONCERN_SIGNALS: tuple[SignalPattern, ...] = (
    SignalPattern(r"(?:다이어트|살\s*빼|체중)", "체중 관리"),
    SignalPattern(r"(?:탈모|머리카락|모발)", "탈모"),
    SignalPattern(r"(?:주름|피부\s*노화|처짐)", "피부 노화"),
    SignalPattern(r"(?:여드름|트러블|피부\s*고민)", "피부 트러블"),
    SignalPattern(r"(?:임신|출산|산후)", "출산/산후"),
    SignalPattern(r"(?:성형|코|눈|가슴|지방)", "외모 개선"),
    SignalPattern(r"(?:치아|잇몸|치과)", "치아 건강"),
    SignalPattern(r"(?:관절|무릎|허리|척추)", "관절/척추"),
)

VULNERABLE_GROUP_PATTERNS: tuple[VulnerableGroupPattern, ...] = (
    VulnerableGroupPattern(r"(?:청소년|미성년|학생)\s*(?:전용|특별|할인)", "미성년자", "미성년자 대상 의료광고"),
    VulnerableGroupPattern(r"(?:어르신|노인|실버)\s*(?:전용|특별|할인)", "노인", "노인 대상 취약 계층 마케팅"),
    VulnerableGroupPattern(r"(?:임산부|산모|출산)\s*(?:전용|특별)", "임산부", "임산부 대상 마케팅"),
    VulnerableGroupPattern(r"(?:다이어트|살\s*빼|체중\s*감량).*(?:고민|스트레스|우울)", "체중 고민", "체중 관련 심리적 취약점 이용"),
    VulnerableGroupPattern(r"(?:탈모|대머리).*(?:고민|스트레스|콤플렉스)", "탈모 고민", "탈모 관련 심리적 취약점 이용"),
    VulnerableGroupPattern(r"(?:주름|노화|늙|처짐).*(?:고민|스트레스|콤플렉스)", "노화 고민", "노화 관련 심리적 취약점 이용"),
)


# ============================================================
# CONTEXT VALIDATION
# ============================================================

SENTENCE_TERMINATORS = frozenset(".!?。！？\n")

# First hit wins; its matched text becomes disclaimer_content
DISCLAIMER_SIGNALS: tuple[SignalPattern, ...] = (
    SignalPattern(r"개인\s*(?:마다\s*)?(?:차이|결과)", "individual_variance"),
    SignalPattern(r"(?:부작용|이상\s*반응)\s*(?:이|가)\s*(?:있을|발생|나타날)", "side_effect_notice"),
    SignalPattern(r"(?:전문의|의사)\s*(?:와|과)\s*(?:상담|상의)", "consult_doctor"),
    SignalPattern(r"(?:결과|효과)\s*(?:를\s*)?보장\s*(?:하지\s*)?않", "no_guarantee"),
    SignalPattern(r"(?:사전\s*)?(?:상담|검사)\s*(?:이|가)\s*(?:필요|필수)", "pre_consult_required"),
)

EVIDENCE_SIGNALS: tuple[SignalPattern, ...] = (
    SignalPattern(r"(?:연구|논문|학회)\s*(?:결과|발표|보고)", "research_citation"),
    SignalPattern(r"(?:임상|실험)\s*(?:결과|데이터)", "clinical_data"),
    SignalPattern(r"(?:식약처|FDA|CE)\s*(?:허가|승인|인증)", "regulatory_approval"),
    SignalPattern(r"\d*\s*%\s*(?:의|가)\s*(?:환자|분)", "patient_statistic"),
)

CONDITIONAL_SIGNALS: tuple[SignalPattern, ...] = (
    SignalPattern(r"(?:경우에\s*따라|상황에\s*따라)", "situational"),
    SignalPattern(r"(?:할\s*수\s*있|될\s*수\s*있)", "possibility"),
    SignalPattern(r"(?:기대|예상)\s*(?:할\s*수\s*있|됩니다)", "expectation"),
    SignalPattern(r"개인\s*차이", "individual_variance"),
)

# Aggravating terms, evaluated over the enclosing sentence
AGGRAVATING_SIGNALS: tuple[SignalPattern, ...] = (
    SignalPattern(r"(?:100\s*%|완벽|확실|틀림없)", "absolute_certainty", 0.20),
    SignalPattern(r"(?:보장|약속)", "guarantee_promise", 0.15),
    SignalPattern(r"(?:부작용\s*(?:이\s*)?없|완전히\s*안전|안전\s*함)", "no_side_effect", 0.15),
)

# Mitigating weights
DISCLAIMER_WEIGHT = -0.15
EVIDENCE_WEIGHT = -0.10
CONDITIONAL_WEIGHT = -0.10

ADJUSTMENT_FLOOR = -0.45
ADJUSTMENT_CEILING = 0.50

LIKELY_VIOLATION_THRESHOLD = 0.7


# ============================================================
# VIOLATION TYPE LOOKUP
# ============================================================

# AI label → type. Substring lookup, first entry contained in the label wins.
AI_VIOLATION_TYPE_TABLE: tuple[tuple[str, ViolationType], ...] = (
    ("치료효과 보장", ViolationType.GUARANTEE),
    ("효과 보장", ViolationType.GUARANTEE),
    ("암시적 효과 보장", ViolationType.GUARANTEE),
    ("부작용 부정", ViolationType.FALSE_CLAIM),
    ("부작용 축소", ViolationType.FALSE_CLAIM),
    ("허위 광고", ViolationType.FALSE_CLAIM),
    ("최상급 표현", ViolationType.EXAGGERATION),
    ("과장 표현", ViolationType.EXAGGERATION),
    ("과장", ViolationType.EXAGGERATION),
    ("비교 광고", ViolationType.COMPARISON),
    ("비교광고", ViolationType.COMPARISON),
    ("환자 유인", ViolationType.PRICE_INDUCEMENT),
    ("가격 유인", ViolationType.PRICE_INDUCEMENT),
    ("전후 사진", ViolationType.BEFORE_AFTER),
    ("전후사진", ViolationType.BEFORE_AFTER),
    ("체험기", ViolationType.TESTIMONIAL),
    ("후기", ViolationType.TESTIMONIAL),
)

# Rule-engine category → type. Exact match.
RULE_CATEGORY_TYPES: dict[str, ViolationType] = {
    "치료효과보장": ViolationType.GUARANTEE,
    "부작용부정": ViolationType.FALSE_CLAIM,
    "최상급표현": ViolationType.EXAGGERATION,
    "비교광고": ViolationType.COMPARISON,
    "환자유인": ViolationType.PRICE_INDUCEMENT,
    "전후사진": ViolationType.BEFORE_AFTER,
    "체험기": ViolationType.TESTIMONIAL,
}

# Patterns whose severity is never softened by a disclaimer
ABSOLUTE_VIOLATION_IDS = frozenset({
    "P-56-01-001",  # 100% cure / success
    "P-56-01-002",  # 100% effect guarantee
    "P-56-02-001",  # side-effect denial
})

MEDICAL_SERVICE_ACT = "의료법"


def lookup_violation_type(label: Optional[str]) -> ViolationType:
    """Resolve a free-text AI label to a ViolationType."""
    if not label:
        return ViolationType.OTHER
    for phrase, vtype in AI_VIOLATION_TYPE_TABLE:
        if phrase in label:
            return vtype
    return ViolationType.OTHER
