from __future__ import annotations
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator

# ===== 레슨 구조 (모델 출력) =====

class LessonSection(BaseModel):
    """레슨의 한 섹션. 리스트 순서 = 화면 표시 순서"""
    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Title of the lesson section.")
    content: str = Field(..., description="Content of the lesson section.")

class Lesson(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="The title of the lesson.")
    introduction: str = Field(..., description="A brief introduction to the lesson.")
    sections: List[LessonSection] = Field(..., description="The sections of the lesson.")
    summary: str = Field(..., description="A summary of the lesson.")

    def is_empty(self) -> bool:
        texts = (self.title, self.introduction, self.summary)
        return not self.sections and not any(t.strip() for t in texts)

# ===== 프롬프트 입력/출력 =====

class GenerateLessonRequest(BaseModel):
    topic: str = Field(..., description="The topic for which to generate a lesson.")

    @field_validator("topic")
    @classmethod
    def _topic_not_blank(cls, v: str) -> str:
        # 공백만 있는 주제는 거부. 저장은 입력값 그대로
        if not v.strip():
            raise ValueError("Please enter a topic.")
        return v

class GenerateLessonOutput(BaseModel):
    lesson: Lesson = Field(..., description="The generated lesson in a structured format.")

class ImproveLessonRequest(BaseModel):
    lesson: str = Field(..., description="The lesson to improve.")
    feedback: str = Field(..., description="The feedback to use to improve the lesson.")

class ImproveLessonOutput(BaseModel):
    """
    모델에는 camelCase(improvedLesson) 스키마로 전달
    """
    model_config = ConfigDict(populate_by_name=True)

    improved_lesson: str = Field(..., alias="improvedLesson", description="The improved lesson.")

# ===== 요청 추적 (세션 상태) =====

LessonStatus = Literal["pending", "generated", "failed"]
NotificationVariant = Literal["default", "destructive"]

class GeneratedLessonRecord(BaseModel):
    id: str
    topic: str
    lesson: Optional[Lesson] = None
    status: LessonStatus = "pending"

    @property
    def is_terminal(self) -> bool:
        return self.status != "pending"

    def mark_generated(self, lesson: Lesson) -> bool:
        """pending → generated. 이미 종료 상태면 아무것도 하지 않고 False"""
        if self.is_terminal:
            return False
        self.lesson = lesson
        self.status = "generated"
        return True

    def mark_failed(self) -> bool:
        """pending → failed. lesson은 비워둔다"""
        if self.is_terminal:
            return False
        self.lesson = None
        self.status = "failed"
        return True

class Notification(BaseModel):
    title: str
    description: str
    variant: NotificationVariant = "default"

# ===== API 요청/응답 =====

class SubmitTopicRequest(BaseModel):
    topic: str = ""

class ImproveRecordRequest(BaseModel):
    feedback: str

class HistoryResponse(BaseModel):
    items: List[GeneratedLessonRecord]
    is_loading: bool

class NotificationsResponse(BaseModel):
    items: List[Notification]
