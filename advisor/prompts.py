"""Prompt-Aufbau für KI-Analyse und KI-Zuteilung.

Die Prompts sind koreanisch, weil Antworttexte direkt den Lehrkräften
angezeigt werden.
"""

import json
from typing import Iterable

from analysis.class_stats import ClassStats
from models.catalog import TagCatalog
from models.relationship import Relationship
from models.student import Student


def _dumps(obj) -> str:
    return json.dumps(obj, indent=2, ensure_ascii=False)


ANALYSIS_RESPONSE_SCHEMA = """\
{
  "classAnalyses": [
    {
      "classNumber": 1,
      "genderBalance": "균형 상태 설명",
      "behaviorAnalysis": "행동 특성 분석",
      "specialNoteAnalysis": "특이사항 분석",
      "relationshipAnalysis": "관계 분석",
      "rankAnalysis": "석차 분포 분석 (석차 데이터가 있는 경우)",
      "difficultyLevel": "상/중/하",
      "summary": "학급 요약 (2-3문장)"
    }
  ],
  "overallAnalysis": {
    "genderBalanceScore": "전체 성별 균형 점수 (1-10)",
    "difficultyBalanceScore": "학급간 지도 난이도 균형 점수 (1-10)",
    "relationshipScore": "관계 배치 적절성 점수 (1-10)",
    "rankBalanceScore": "석차 분포 균형 점수 (1-10, 석차 데이터가 있는 경우)",
    "overallScore": "종합 점수 (1-10)",
    "strengths": ["강점1", "강점2"],
    "improvements": ["개선점1", "개선점2"],
    "recommendations": "종합 권장사항 (3-4문장)"
  }
}"""

ASSIGNMENT_RESPONSE_SCHEMA = """\
{
  "assignments": [
    { "studentId": "학생ID", "targetClass": 배정학급번호 },
    ...
  ],
  "reasoning": "배정 이유 간략 설명"
}"""


def build_analysis_prompt(
    class_stats: Iterable[ClassStats],
    behavior_catalog: TagCatalog,
    special_note_catalog: TagCatalog,
) -> str:
    """Prompt für die Bewertung einer fertigen Zuteilung."""
    stats = [s.to_prompt_dict() for s in class_stats]
    return f"""
당신은 초등학교 반편성 전문 컨설턴트입니다. 다음 반편성 결과를 분석하고 종합 평가를 제공해주세요.

## 학급별 현황
{_dumps(stats)}

## 행동 특성 옵션 정보 (점수가 높을수록 지도가 어려움)
{_dumps(behavior_catalog.summary())}

## 특이사항 옵션 정보
{_dumps(special_note_catalog.summary())}

## 분석 요청 사항
1. 각 학급의 성별 균형 평가
2. 행동 특성 분포의 적절성 평가
3. 특이 사항 분포 분석
4. 갈등/우호 관계 현황 분석
5. 각 학급의 지도 난이도 비교
6. 석차 분포 균형 분석 (석차가 있는 학생들의 학급별 분포)
7. 종합 평가 및 권장사항

## 응답 형식 (반드시 이 JSON 형식으로만 응답)
{ANALYSIS_RESPONSE_SCHEMA}
"""


def _student_payload(s: Student) -> dict:
    # Keine Namen oder Notizen an den Anbieter
    return {
        "id": s.id,
        "current_class": s.current_class,
        "gender": s.gender.value,
        "behaviors": s.behaviors,
        "special_notes": s.special_notes,
        "custom_behavior": s.custom_behavior,
        "custom_special_note": s.custom_special_note,
        "student_rank": s.student_rank,
    }


def build_assignment_prompt(
    students: Iterable[Student],
    relationships: Iterable[Relationship],
    target_classes: int,
) -> str:
    """Prompt für einen Zuteilungsvorschlag aller Kinder auf 1..target_classes."""
    student_rows = [_student_payload(s) for s in students]
    relation_rows = [
        {"student_id": r.student_id, "target_student_id": r.target_student_id,
         "type": r.type.value}
        for r in relationships
    ]
    return f"""
당신은 초등학교 반편성 전문가입니다. 다음 학생들을 {target_classes}개의 진학 학급에 최적으로 배정해주세요.

## 배정 원칙
1. 성별 균형: 각 학급에 남녀 학생 수가 균등해야 합니다.
2. 행동 특성 분산: 리더십, 산만함 등 특정 특성이 한 학급에 몰리지 않게 합니다.
3. 갈등 관계 분리: conflict 관계인 학생들은 다른 학급에 배치합니다.
4. 우호 관계 고려: friendly 관계는 가능하면 같은 학급에 배치하되, 필수는 아닙니다.
5. 특이사항 분산: 쌍둥이는 분리, 특별관리 학생은 분산합니다.

## 학생 데이터
{_dumps(student_rows)}

## 관계 데이터 (student_id와 target_student_id 사이의 관계)
{_dumps(relation_rows)}

## 응답 형식
다음 JSON 형식으로만 응답하세요:
{ASSIGNMENT_RESPONSE_SCHEMA}
"""
