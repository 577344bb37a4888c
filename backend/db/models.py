import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase


def _uuid() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    def to_dict(self) -> dict:
        data = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            data[column.key] = value.isoformat() if isinstance(value, datetime) else value
        return data


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String, nullable=False, index=True)
    filename = Column(String, nullable=False)
    file_url = Column(String, nullable=False, default="")
    parsed_content = Column(Text, nullable=True)
    parsed_summary = Column(Text, nullable=True)
    file_size_bytes = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=func.now())


class JobDescription(Base):
    __tablename__ = "job_descriptions"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String, nullable=False, index=True)
    url = Column(String, nullable=True)
    job_content = Column(Text, nullable=True)
    job_summary = Column(Text, nullable=True)
    company_name = Column(String, nullable=True)
    job_title = Column(String, nullable=True)
    created_at = Column(DateTime, default=func.now())


class InterviewSession(Base):
    __tablename__ = "interview_sessions"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String, nullable=False, index=True)
    resume_id = Column(String(36), ForeignKey("resumes.id"), nullable=False)
    job_description_id = Column(String(36), ForeignKey("job_descriptions.id"), nullable=False)
    difficulty_level = Column(String, nullable=False, default="medium")
    interview_type = Column(String, nullable=False, default="professional")
    voice_gender = Column(String, nullable=False, default="female")
    communication_style = Column(String, nullable=False, default="corporate_professional")
    question_count = Column(Integer, nullable=False, default=5)
    status = Column(String, nullable=False, default="pending")  # pending, active, completed
    overall_score = Column(Float, nullable=True)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    voice_session_id = Column(String, nullable=True)
    demo_type = Column(String, nullable=True)
    created_at = Column(DateTime, default=func.now())


class InterviewQuestion(Base):
    __tablename__ = "interview_questions"

    id = Column(String(36), primary_key=True, default=_uuid)
    session_id = Column(String(36), ForeignKey("interview_sessions.id"), nullable=False, index=True)
    question_text = Column(Text, nullable=False)
    question_order = Column(Integer, nullable=False)
    question_type = Column(String, nullable=True)  # behavioral, technical, situational
    expected_answer_points = Column(JSON, nullable=True)  # list of strings
    follow_up_question = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now())


class ConversationTurn(Base):
    __tablename__ = "interview_conversation"
    __table_args__ = (UniqueConstraint("session_id", "turn_number", name="uq_conversation_turn"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    session_id = Column(String(36), ForeignKey("interview_sessions.id"), nullable=False, index=True)
    turn_number = Column(Integer, nullable=False)
    speaker = Column(String, nullable=False)  # interviewer, candidate
    message_type = Column(String, nullable=False)  # main_question, follow_up, response, transition, closing
    message_text = Column(Text, nullable=False)
    word_count = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=func.now())


class InterviewFeedback(Base):
    __tablename__ = "interview_feedback"

    id = Column(String(36), primary_key=True, default=_uuid)
    session_id = Column(String(36), ForeignKey("interview_sessions.id"), nullable=False, unique=True)
    overall_feedback = Column(Text, nullable=True)
    strengths = Column(JSON, nullable=True)
    areas_for_improvement = Column(JSON, nullable=True)
    suggested_next_steps = Column(JSON, nullable=True)
    communication_score = Column(Float, nullable=True)
    content_score = Column(Float, nullable=True)
    confidence_score = Column(Float, nullable=True)
    preparation_score = Column(Float, nullable=True)
    response_analyses = Column(JSON, nullable=True)  # list of per-answer analyses
    resume_analysis = Column(JSON, nullable=True)
    job_fit_analysis = Column(JSON, nullable=True)
    preparation_analysis = Column(JSON, nullable=True)
    coaching_analysis = Column(JSON, nullable=True)
    degraded_steps = Column(JSON, nullable=True)  # step name -> reason
    analysis_completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
