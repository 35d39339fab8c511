"""
Prompt templates for the CareerMate AI features.

Each builder returns (system_prompt, user_prompt). Every prompt asks for a
single JSON object and spells out the exact schema the front end renders.
"""
import json
from typing import Any, Dict, List, Tuple

STORY_TYPES = ("interview", "linkedin", "networking", "resume")

NO_PLACEHOLDERS = (
    "Be specific about role titles, skill names, course platforms, companies and project details. "
    "Never return placeholder text such as \"Job title\" or \"Company name\"."
)

CAREER_GUIDANCE_SCHEMA = """{
  "careerPaths": [
    "Real career path with specific role title and industry"
  ],
  "skillGaps": [
    "Real skill name with level (e.g., 'Advanced React with TypeScript')"
  ],
  "learningRoadmap": {
    "courses": [
      "Real course name with platform (e.g., 'Meta Front-End Developer on Coursera')"
    ],
    "projects": [
      "Real project idea with scope and tech stack"
    ]
  }
}"""

MOCK_INTERVIEW_SCHEMA = """{
  "questions": [
    {
      "question": "Actual interview question text for this role",
      "tips": ["Specific tip 1 for answering this question", "Specific tip 2 for answering this question"],
      "category": "Exact category: Technical, Behavioral, System Design, Problem Solving, or Leadership"
    }
  ]
}"""

JOB_SUGGESTIONS_SCHEMA = """{
  "opportunities": [
    {
      "title": "Real job title from current market",
      "company": "Real existing company name",
      "location": "Real city and state",
      "type": "Full-time/Part-time/Internship/Contract",
      "requiredSkills": ["Real skill names"],
      "description": "Authentic job description",
      "salary": "Real market salary range",
      "postedDate": "Recent date like '2 days ago' or 'This week'"
    }
  ],
  "skillMatch": {
    "Real skill name": 85
  },
  "recommendations": [
    "Real recommendation based on user's profile"
  ]
}"""

EVALUATION_SCHEMA = """{
  "score": 8,
  "feedback": "Actual feedback text based on the answer",
  "improvements": [
    "Specific improvement suggestion 1",
    "Specific improvement suggestion 2"
  ]
}"""

CAREER_DISCOVERY_SCHEMA = """{
  "careerPaths": [
    {
      "title": "Real career path title that combines their current role and interests",
      "description": "How this career path connects their current skills and interests",
      "transferableSkills": ["Skill from current role"],
      "skillGaps": ["Specific skill to develop"],
      "marketDemand": "High/Medium/Low based on current market trends",
      "salaryRange": "Realistic salary range for this role",
      "companies": ["Real company"],
      "nextSteps": ["Specific actionable step"]
    }
  ],
  "learningRoadmap": {
    "immediate": ["Action to take this week"],
    "shortTerm": ["Action to take in 1-3 months"],
    "longTerm": ["Action to take in 6-12 months"],
    "resources": {
      "courses": ["Real course name with platform"],
      "projects": ["Real project idea"],
      "certifications": ["Real certification name"],
      "networking": ["Specific networking strategy"]
    }
  },
  "conversation": [
    {
      "role": "ai",
      "content": "Insight about their unique combination",
      "timestamp": 1234567890,
      "type": "insight"
    }
  ]
}"""

STORY_GUIDELINES = {
    "interview": "a spoken 'tell me about yourself' answer of 150-250 words, first person, ending with why they want their next role",
    "linkedin": "a LinkedIn 'About' section of 200-300 words, first person, warm and professional, with a closing call to connect",
    "networking": "a 30-60 second networking elevator pitch, conversational, memorable, ending with a question or ask",
    "resume": "a 3-4 sentence resume professional summary, third-person implied (no pronouns), packed with concrete skills and achievements",
}


def _profile_json(profile: Dict[str, Any]) -> str:
    return json.dumps(profile, indent=2, ensure_ascii=False)


def career_guidance_prompt(profile: Dict[str, Any]) -> Tuple[str, str]:
    system = (
        "You are a career advisor. Analyze the user profile and return strict JSON "
        "in the exact format requested."
    )
    user = f"""You are an expert career advisor with deep knowledge of the tech industry and current market trends.

Based on the user's profile, provide comprehensive career guidance including:
1. Career paths that match their skills and interests
2. Identified skill gaps with improvement steps
3. A learning roadmap of courses and projects

User Profile: {_profile_json(profile)}

Consider current market conditions, the user's specific skill level and experience,
realistic career progression paths and concrete steps they can take immediately.
{NO_PLACEHOLDERS}

Return 4 items per list, in this exact JSON format:
{CAREER_GUIDANCE_SCHEMA}"""
    return system, user


def mock_interview_prompt(role: str) -> Tuple[str, str]:
    system = (
        "You are an expert technical interviewer. Generate interview questions and return "
        "strict JSON in the exact format requested."
    )
    user = f"""You are an expert technical interviewer with deep knowledge of the {role} position.

Generate interview questions that cover:
1. Technical skills and problem-solving
2. Real-world scenarios and challenges
3. System design and architecture
4. Team collaboration and communication
5. Industry best practices and current trends

Each question includes the question itself, 2-3 specific, actionable tips for candidates,
and its category (Technical, Behavioral, System Design, Problem Solving, or Leadership).
Make questions challenging but fair and specific to the {role} role.

Return the response in this exact JSON format:
{MOCK_INTERVIEW_SCHEMA}"""
    return system, user


def job_suggestions_prompt(profile: Dict[str, Any]) -> Tuple[str, str]:
    system = (
        "You are a career advisor providing job opportunities. Generate realistic job opportunities "
        "based on the user's profile. Return STRICT JSON only in the exact format requested."
    )
    user = f"""You are an expert career advisor with access to current job market data.

Based on the user's profile, generate realistic job opportunities that match their skills and experience.

User Profile: {_profile_json(profile)}

Instructions:
1. Use ONLY real, existing companies that hire for this kind of role
2. Use real job titles, current market salary ranges and skills actually required
3. Write job descriptions that read like real postings
4. Give 3-4 personalized recommendations based on the user's skill gaps against these
   opportunities, their experience level and realistic next steps
{NO_PLACEHOLDERS}

Return the response in this exact JSON format:
{JOB_SUGGESTIONS_SCHEMA}"""
    return system, user


def evaluation_prompt(question: str, answer: str, role: str) -> Tuple[str, str]:
    system = (
        "You are an expert technical interviewer. Evaluate answers and return strict JSON "
        "in the exact format requested."
    )
    user = f"""You are an expert technical interviewer evaluating a candidate's answer for a {role} position.

Question: {question}
Candidate's Answer: {answer}

Evaluate this answer and provide a score from 1 to 10, constructive feedback and areas for improvement.
Be fair but thorough. Consider technical accuracy, clarity and completeness.

Provide your response in this exact JSON format:
{EVALUATION_SCHEMA}"""
    return system, user


def career_discovery_prompt(profile: Dict[str, Any]) -> Tuple[str, str]:
    system = (
        "You are an expert career discovery specialist. Analyze the user profile and return "
        "strict JSON in the exact format requested."
    )
    user = f"""You are an expert career discovery specialist with deep knowledge of how different skills
and interests combine into unique career opportunities.

Discover unexpected career possibilities that combine the user's current role with their interests.

User Profile: {_profile_json(profile)}

Instructions:
1. Show how skills from their current role transfer to each path
2. Only suggest career paths that exist in the market today
3. Identify realistic skill gaps and actionable next steps
4. Use real company names and realistic salary ranges
{NO_PLACEHOLDERS}

Return the response in this exact JSON format:
{CAREER_DISCOVERY_SCHEMA}"""
    return system, user


def career_story_prompt(profile: Dict[str, Any], story_type: str) -> Tuple[str, str]:
    if story_type not in STORY_GUIDELINES:
        raise ValueError(f"Unknown story type: {story_type}")
    system = (
        "You are a career storytelling coach. Write compelling, authentic professional narratives "
        "and return strict JSON in the exact format requested."
    )
    user = f"""Write {STORY_GUIDELINES[story_type]}.

Use only facts from this profile; do not invent employers, titles or numbers.

User Profile: {_profile_json(profile)}

Return the response in this exact JSON format:
{{
  "story": "The complete story text"
}}"""
    return system, user


def personality_profile(answers: List[str]) -> Dict[str, Any]:
    """Career-guidance profile derived from work-preference answers"""
    return {
        "skills": ", ".join(answers),
        "interests": "Personality-based career guidance",
        "goals": "Career development based on work preferences",
        "experience": "Entry level",
        "education": "Self-assessment",
        "location": "Remote",
        "preferredRole": "Career guidance",
    }
