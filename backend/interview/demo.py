"""
Canned demo interviews.

Each scenario seeds a resume, a job description, a session flagged with
``demo_type`` and a fixed question list, so the voice interview can start
without the setup flow.
"""

import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from db.models import InterviewQuestion, InterviewSession, JobDescription, Resume
from job_setup.summarizer import summarize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DemoScenario:
    demo_type: str
    resume_filename: str
    resume_text: str
    resume_summary_fallback: str
    job_url: str
    job_text: str
    job_summary_fallback: str
    company_name: str
    job_title: str
    questions: tuple[str, ...]


TONY_STARK_RESUME = """\
# Anthony Edward "Tony" Stark
**Chief Executive Officer & Chief Technology Officer**
tstark@starkindustries.com | Malibu, CA

## Executive Summary
Visionary technology leader with 15+ years driving breakthrough innovation in clean energy,
advanced materials and autonomous systems. Led the company's transformation from defense
contractor to global clean tech pioneer, increasing valuation by 2,400%. Holds 73+ patents in
propulsion, energy storage and AI systems.

## Professional Experience
### Chief Executive Officer & CTO | Stark Industries | 2008 - Present
- Pivoted the company from defense contracting to clean energy leadership
- Invented and commercialized Arc Reactor clean energy technology
- Led an R&D organization of 200+ engineers across 12 innovation centers
- Scaled manufacturing to 40+ countries and cut supply chain emissions by 89%

### Lead Systems Engineer | Stark Industries | 2005 - 2008
- Designed defense systems resulting in $2.1B in government contracts
- Pioneered miniaturization techniques for complex electronic systems
- Established rapid prototyping methods adopted company-wide

## Education
Massachusetts Institute of Technology: MS Electrical Engineering, BS Physics

## Recognition
Time Person of the Year, MIT Technology Review Innovator Under 35, IEEE Medal of Honor
"""

APPLE_CEO_JOB = """\
# Chief Executive Officer
**Apple Inc. | Cupertino, CA | Full-time, Executive**

## The Role
We are seeking an exceptional Chief Executive Officer to lead Apple into its next era of
innovation and growth, reimagining AI across our ecosystem, defining the future of spatial
computing and pioneering new product categories.

## Key Responsibilities
- Define and execute Apple's 10-year vision for AI, spatial computing and emerging technologies
- Make critical product portfolio decisions across hardware, software and services
- Navigate a complex global regulatory environment, including App Store and antitrust concerns
- Lead 150,000+ employees while preserving Apple's design-first, quality-obsessed culture
- Deploy a $160B+ cash position across R&D, acquisitions and shareholder returns

## Required Qualifications
- 15+ years of senior executive experience at technology companies with >$50B revenue
- Deep understanding of AI/ML, computer vision and human-computer interface design
- Experience with platform ecosystems, developer relations and two-sided markets

## Compensation
Base salary: $3,000,000 - $5,000,000 annually, plus equity and performance bonuses.
"""

TONY_STARK_QUESTIONS = (
    "Tony, your Arc Reactor technology revolutionized clean energy at Stark Industries. How would you apply that innovation mindset to help Apple achieve carbon neutrality by 2030 while maintaining rapid product development cycles?",
    "You've successfully managed both the Avengers superhero team and a global corporation. How would your experience handling strong personalities like Thor and Tony prepare you to lead Apple's 150,000 employees and executive team?",
    "Siri clearly needs an intelligence upgrade to compete with ChatGPT and other AI assistants. How would you transform Siri to be as responsive and capable as your FRIDAY AI system, while preserving Apple's privacy-first approach?",
    "Apple Vision Pro has groundbreaking technology but slow adoption. You've made spatial computing work with your heads-up displays and holographic interfaces. What's your strategy to make Vision Pro as transformative as the iPhone?",
    "At Stark Industries, you pivoted from weapons manufacturing to clean technology. If you had to identify Apple's next major product category beyond phones and computers, what emerging technology would you bet the company on?",
    "Managing the egos and conflicts within the Avengers taught you crisis leadership. How would you handle Apple's complex relationship with global regulators, especially around App Store policies and antitrust concerns?",
    "Your rapid prototyping approach allowed you to build the Mark I suit in a cave with scraps. How would you accelerate Apple's traditionally secretive, perfectionist development culture to compete with faster-moving AI companies?",
    "You've literally saved the world multiple times and revolutionized entire industries. Looking at Apple's next decade, what's your vision for how the company can have its most significant impact on humanity's future?",
)

SANTA_CLAUS_RESUME = """\
# Nicholas "Santa" Claus
**Chief Executive Officer & Global Operations Director**
s.claus@northpole.org | North Pole, Arctic

## Executive Summary
Transformational leader with 1,700+ years of experience in global logistics, international
relations and large-scale manufacturing. Runs the world's largest gift distribution network,
serving 2.6 billion children across 195 countries with a 99.97% on-time delivery rate.

## Professional Experience
### Chief Executive Officer | North Pole Enterprises | 324 AD - Present
- Maintain 99.97% on-time delivery across 195 countries in a single 24-hour window
- Run a zero-emission, reindeer-powered global supply chain
- Lead a workforce of 50,000+ elves with 100% retention and zero workplace injuries
- Hold operating agreements with all 195 UN member states while staying politically neutral

## Core Competencies
International logistics, crisis response, conflict resolution, stakeholder relations,
sustainable operations, real-time behavioral analytics
"""

PRESIDENT_JOB = """\
# President of the United States
**United States of America | Washington, D.C. | Four-year term**

## The Role
We seek a visionary chief executive to lead the United States through a pivotal period,
uniting the nation while navigating the most complex international landscape in generations.

## Key Responsibilities
- Serve as Commander-in-Chief of the armed forces
- Appoint and oversee 15 Cabinet secretaries and 4,000+ political appointees
- Work with Congress to pass legislation and represent the nation in negotiations with world leaders
- Respond to natural disasters, pandemics and other national emergencies

## Requirements
- Natural-born citizen, at least 35 years old, 14 years of residency
- Proven experience leading large, diverse organizations through crisis
- Ability to build consensus across deep political divides

## Compensation
Salary of $400,000 per year, plus residence, travel and security benefits.
"""

SANTA_PRESIDENT_QUESTIONS = (
    "Hi Santa! What made you decide to run for President after all these years managing Christmas operations at the North Pole?",
    "You've successfully managed elves for centuries. How would you apply that experience to working with Congress and handling political disagreements?",
    "You know every child in the world through your naughty-or-nice system. What would you want American families to know about how you'd lead the country?",
    "Your philosophy is about being good versus naughty and bringing joy to others. How would these values guide your leadership style as President?",
)

DEMO_SCENARIOS = {
    "tony-stark": DemoScenario(
        demo_type="tony_stark",
        resume_filename="tony-stark-resume.md",
        resume_text=TONY_STARK_RESUME,
        resume_summary_fallback="Tony Stark: MIT graduate, CEO/CTO of Stark Industries, expert in clean energy and AI systems.",
        job_url="https://jobs.apple.com/ceo-demo",
        job_text=APPLE_CEO_JOB,
        job_summary_fallback="Apple CEO role: Lead AI transformation, Vision Pro strategy, and next-generation product development.",
        company_name="Apple Inc.",
        job_title="Chief Executive Officer",
        questions=TONY_STARK_QUESTIONS,
    ),
    "santa-president": DemoScenario(
        demo_type="santa_president",
        resume_filename="santa-claus-resume.md",
        resume_text=SANTA_CLAUS_RESUME,
        resume_summary_fallback="Santa Claus: centuries of global logistics leadership at North Pole Enterprises.",
        job_url="https://government.usa.gov/president-2029",
        job_text=PRESIDENT_JOB,
        job_summary_fallback="President of the United States: lead the executive branch, unite the country, manage crises.",
        company_name="United States of America",
        job_title="President of the United States",
        questions=SANTA_PRESIDENT_QUESTIONS,
    ),
}


async def seed_demo(db: AsyncSession, user_id: str, scenario: DemoScenario) -> InterviewSession:
    resume_summary, job_summary = await asyncio.gather(
        asyncio.to_thread(summarize, "resume", scenario.resume_text, scenario.resume_summary_fallback),
        asyncio.to_thread(summarize, "job description", scenario.job_text, scenario.job_summary_fallback),
    )

    resume = Resume(
        user_id=user_id,
        filename=scenario.resume_filename,
        file_url=f"demo://{scenario.resume_filename.rsplit('.', 1)[0]}",
        parsed_content=scenario.resume_text,
        parsed_summary=resume_summary,
        file_size_bytes=len(scenario.resume_text.encode("utf-8")),
    )
    job = JobDescription(
        user_id=user_id,
        url=scenario.job_url,
        job_content=scenario.job_text,
        job_summary=job_summary,
        company_name=scenario.company_name,
        job_title=scenario.job_title,
    )
    db.add_all([resume, job])
    await db.flush()

    session = InterviewSession(
        user_id=user_id,
        resume_id=resume.id,
        job_description_id=job.id,
        difficulty_level="medium",
        interview_type="hiring_manager",
        voice_gender="male",
        communication_style="corporate_professional",
        question_count=len(scenario.questions),
        status="pending",
        demo_type=scenario.demo_type,
    )
    db.add(session)
    await db.flush()

    db.add_all(
        InterviewQuestion(
            session_id=session.id,
            question_text=text,
            question_order=order,
            question_type="behavioral",
        )
        for order, text in enumerate(scenario.questions, 1)
    )
    await db.commit()

    logger.info("Seeded %s demo session %s for user %s", scenario.demo_type, session.id, user_id)
    return session
