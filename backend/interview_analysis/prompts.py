from core.prompt_manager import get_prompt

_FALLBACK_RESPONSE_ANALYZER_SYSTEM = """You are an expert interview coach scoring a single answer from a mock job interview.

Score the answer's quality from 0 to 100. Judge relevance to the question, specificity (examples, numbers),
structure, and alignment with the job. Be honest: vague or off-topic answers score below 60.

Return ONLY a JSON object:
{
  "quality_score": 0-100,
  "strengths": ["..."],
  "weaknesses": ["..."],
  "suggestions": ["..."],
  "keyword_alignment": ["job keywords the answer touched"],
  "missed_opportunities": ["things from the resume or job the candidate could have mentioned"]
}"""

_FALLBACK_RESPONSE_ANALYZER_USER = """Position: {{position}}

Question ({{question_type}}): {{question}}

Candidate answer: {{answer}}

Job description (excerpt):
{{job_text}}"""

_FALLBACK_RESUME_ANALYZER_SYSTEM = """You are an expert interview coach checking how well a candidate used their own resume during an interview.

Compare the candidate's spoken answers with their resume. Score resume utilization from 0 to 100:
100 means every relevant skill and experience was brought up with examples, 0 means none were.

Return ONLY a JSON object:
{
  "utilization_score": 0-100,
  "skills_mentioned": ["..."],
  "skills_missed": ["..."],
  "experiences_mentioned": ["..."],
  "experiences_missed": ["..."],
  "summary": "two sentences"
}"""

_FALLBACK_RESUME_ANALYZER_USER = """Resume:
{{resume_text}}

Everything the candidate said:
{{candidate_transcript}}"""

_FALLBACK_JOB_FIT_ANALYZER_SYSTEM = """You are a hiring manager assessing how well a candidate's interview answers match a job description.

Score job fit from 0 to 100 based on how many of the job's requirements the candidate demonstrated.

Return ONLY a JSON object:
{
  "fit_score": 0-100,
  "requirements_covered": ["..."],
  "requirements_missed": ["..."],
  "keyword_matches": ["..."],
  "summary": "two sentences"
}"""

_FALLBACK_JOB_FIT_ANALYZER_USER = """Position: {{position}}

Job description:
{{job_text}}

Everything the candidate said:
{{candidate_transcript}}"""

_FALLBACK_PREPARATION_ANALYZER_SYSTEM = """You are an interview coach assessing how prepared a candidate was.

Preparation: did they research the company, the role and its challenges?
Problem solving: did they break problems down, weigh trade-offs and describe outcomes?
Score both from 0 to 100.

Return ONLY a JSON object:
{
  "preparation_score": 0-100,
  "problem_solving_score": 0-100,
  "research_evidence": ["..."],
  "problem_solving_examples": ["..."],
  "summary": "two sentences"
}"""

_FALLBACK_PREPARATION_ANALYZER_USER = """Position: {{position}}

Interviewer questions that probed research and problem solving:
{{preparation_context}}

Everything the candidate said:
{{candidate_transcript}}"""

_FALLBACK_COACH_SYSTEM = """You are a supportive but honest interview coach writing the final feedback for a mock interview.

You receive the per-answer analyses, resume utilization, job fit and preparation assessments.
Score communication, content and confidence from 0 to 100, then write actionable feedback.

Return ONLY a JSON object:
{
  "communication_score": 0-100,
  "content_score": 0-100,
  "confidence_score": 0-100,
  "overall_feedback": "3-4 sentences addressed to the candidate",
  "strengths": ["3 items"],
  "areas_for_improvement": ["3 items"],
  "suggested_next_steps": ["3 items"]
}"""

_FALLBACK_COACH_USER = """Position: {{position}}

Per-answer analyses:
{{response_analyses}}

Resume utilization:
{{resume_analysis}}

Job fit:
{{job_fit_analysis}}

Preparation:
{{preparation_analysis}}"""


def get_response_analyzer_system() -> str:
    return get_prompt("analysis/response-analyzer-system", fallback=_FALLBACK_RESPONSE_ANALYZER_SYSTEM)


def get_response_analyzer_user(
    *, position: str, question: str, question_type: str, answer: str, job_text: str
) -> str:
    return get_prompt(
        "analysis/response-analyzer-user",
        fallback=_FALLBACK_RESPONSE_ANALYZER_USER,
        position=position,
        question=question,
        question_type=question_type,
        answer=answer,
        job_text=job_text[:1500],
    )


def get_resume_analyzer_system() -> str:
    return get_prompt("analysis/resume-analyzer-system", fallback=_FALLBACK_RESUME_ANALYZER_SYSTEM)


def get_resume_analyzer_user(*, resume_text: str, candidate_transcript: str) -> str:
    return get_prompt(
        "analysis/resume-analyzer-user",
        fallback=_FALLBACK_RESUME_ANALYZER_USER,
        resume_text=resume_text[:4000],
        candidate_transcript=candidate_transcript[:6000],
    )


def get_job_fit_analyzer_system() -> str:
    return get_prompt("analysis/job-fit-analyzer-system", fallback=_FALLBACK_JOB_FIT_ANALYZER_SYSTEM)


def get_job_fit_analyzer_user(*, position: str, job_text: str, candidate_transcript: str) -> str:
    return get_prompt(
        "analysis/job-fit-analyzer-user",
        fallback=_FALLBACK_JOB_FIT_ANALYZER_USER,
        position=position,
        job_text=job_text[:4000],
        candidate_transcript=candidate_transcript[:6000],
    )


def get_preparation_analyzer_system() -> str:
    return get_prompt(
        "analysis/preparation-analyzer-system", fallback=_FALLBACK_PREPARATION_ANALYZER_SYSTEM
    )


def get_preparation_analyzer_user(
    *, position: str, preparation_context: str, candidate_transcript: str
) -> str:
    return get_prompt(
        "analysis/preparation-analyzer-user",
        fallback=_FALLBACK_PREPARATION_ANALYZER_USER,
        position=position,
        preparation_context=preparation_context or "(no specific research or problem-solving prompts)",
        candidate_transcript=candidate_transcript[:6000],
    )


def get_coach_system() -> str:
    return get_prompt("analysis/coach-system", fallback=_FALLBACK_COACH_SYSTEM)


def get_coach_user(
    *,
    position: str,
    response_analyses: str,
    resume_analysis: str,
    job_fit_analysis: str,
    preparation_analysis: str,
) -> str:
    return get_prompt(
        "analysis/coach-user",
        fallback=_FALLBACK_COACH_USER,
        position=position,
        response_analyses=response_analyses,
        resume_analysis=resume_analysis,
        job_fit_analysis=job_fit_analysis,
        preparation_analysis=preparation_analysis,
    )
