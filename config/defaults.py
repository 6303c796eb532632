from config.schema import (
    AdvisorConfig,
    ProjectConfig,
    TagOption,
    TagStyle,
)


# ─── VERHALTENS-KATALOG ───
# Positiver Score = schwieriger zu betreuen, negativer Score = entlastend.

BEHAVIOR_OPTIONS: list[TagOption] = [
    TagOption(id="leadership",    label="리더십",   style=TagStyle.SUCCESS, score=-5),
    TagOption(id="active",        label="활동적",   style=TagStyle.SUCCESS, score=-2),
    TagOption(id="introverted",   label="내향적",   style=TagStyle.NEUTRAL, score=0),
    TagOption(id="extroverted",   label="외향적",   style=TagStyle.NEUTRAL, score=0),
    TagOption(id="academic_high", label="학습우수", style=TagStyle.SUCCESS, score=-5),
    TagOption(id="academic_low",  label="학습부진", style=TagStyle.WARNING, score=5),
    TagOption(id="distracted",    label="산만함",   style=TagStyle.DANGER,  score=5),
    TagOption(id="disruptive",    label="수업방해", style=TagStyle.DANGER,  score=10),
    TagOption(id="helpful",       label="협조적",   style=TagStyle.SUCCESS, score=-5),
    TagOption(id="responsible",   label="책임감",   style=TagStyle.SUCCESS, score=-5),
    TagOption(id="creative",      label="창의적",   style=TagStyle.SUCCESS, score=-2),
    TagOption(id="aggressive",    label="공격적",   style=TagStyle.DANGER,  score=10),
    TagOption(id="passive",       label="소극적",   style=TagStyle.NEUTRAL, score=2),
    TagOption(id="emotional",     label="정서불안", style=TagStyle.DANGER,  score=8),
    TagOption(id="peer_issues",   label="교우관계", style=TagStyle.DANGER,  score=8),
    TagOption(id="lying",         label="거짓말",   style=TagStyle.DANGER,  score=8),
    TagOption(id="other_behavior", label="기타",    style=TagStyle.NEUTRAL, score=1),
]


# ─── BESONDERHEITEN-KATALOG ───

SPECIAL_NOTE_OPTIONS: list[TagOption] = [
    TagOption(id="adhd",          label="ADHD",     style=TagStyle.DANGER,  score=10),
    TagOption(id="twins",         label="쌍둥이",   style=TagStyle.WARNING, score=3),
    TagOption(id="disability",    label="장애",     style=TagStyle.WARNING, score=5),
    TagOption(id="multicultural", label="다문화",   style=TagStyle.NEUTRAL, score=1),
    TagOption(id="gifted",        label="영재",     style=TagStyle.SUCCESS, score=-2),
    TagOption(id="special_care",  label="특별관리", style=TagStyle.WARNING, score=5),
    TagOption(id="transfer",      label="전학생",   style=TagStyle.NEUTRAL, score=2),
    TagOption(id="single_parent", label="한부모",   style=TagStyle.NEUTRAL, score=2),
    TagOption(id="grandparent",   label="조손가정", style=TagStyle.NEUTRAL, score=2),
    TagOption(id="low_income",    label="기초수급", style=TagStyle.NEUTRAL, score=2),
    TagOption(id="allergy",       label="알레르기", style=TagStyle.WARNING, score=3),
    TagOption(id="violence",      label="학폭관련", style=TagStyle.DANGER,  score=15),
    TagOption(id="other_note",    label="기타",     style=TagStyle.NEUTRAL, score=1),
]


def default_project_config() -> ProjectConfig:
    """Default-Konfiguration: 4 bisherige Klassen → 4 Zielklassen."""
    return ProjectConfig(
        project_name="반편성 프로젝트",
        current_classes=4,
        target_classes=4,
        behavior_options=list(BEHAVIOR_OPTIONS),
        special_note_options=list(SPECIAL_NOTE_OPTIONS),
        advisor=AdvisorConfig(),
    )
