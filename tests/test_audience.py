"""
Tests for target-audience analysis.
"""

from medcheck.audience import AudienceAnalyzer


class TestTargeting:

    def test_age_gender_concern(self):
        result = AudienceAnalyzer().analyze("30대 여성을 위한 탈모 관리 프로그램")
        assert result.age_targeting == ["30대"]
        assert result.gender_targeting == ["여성"]
        assert result.concern_targeting == ["탈모"]
        assert result.targets_vulnerable_groups is False

    def test_multiple_groups_in_catalog_order(self):
        result = AudienceAnalyzer().analyze("20대부터 50대까지 남성, 여성 모두")
        assert result.age_targeting == ["20대", "50대"]
        assert result.gender_targeting == ["남성", "여성"]

    def test_empty_text(self):
        result = AudienceAnalyzer().analyze("")
        assert result.age_targeting == []
        assert result.gender_targeting == []
        assert result.concern_targeting == []
        assert result.targets_vulnerable_groups is False
        assert result.vulnerable_group_types == []


class TestVulnerableGroups:

    def test_psychological_pressure(self):
        result = AudienceAnalyzer().analyze("탈모 때문에 스트레스 받으셨나요?")
        assert result.targets_vulnerable_groups is True
        assert result.vulnerable_group_types == ["탈모 고민: 탈모 관련 심리적 취약점 이용"]

    def test_elderly_discount(self):
        result = AudienceAnalyzer().analyze("어르신 전용 할인 이벤트")
        assert result.vulnerable_group_types == ["노인: 노인 대상 취약 계층 마케팅"]

    def test_minor_discount(self):
        result = AudienceAnalyzer().analyze("청소년 할인 진행 중")
        assert "미성년자: 미성년자 대상 의료광고" in result.vulnerable_group_types
        assert result.age_targeting == ["10대"]
