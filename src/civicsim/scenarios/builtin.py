"""Built-in simulations.

The three hand-authored simulations are fixed at import time and never
modified at runtime. Generated simulations live in the simulation repository
instead (see civicsim.scenarios.registry).
"""

from civicsim.models.simulation import Simulation

_LOCAL_ELECTION = {
    "id": "1",
    "title": "Local Election Campaign",
    "description": "Run for district mayor and make the key decisions of a local campaign.",
    "category": "governance",
    "difficulty": "beginner",
    "estimated_time": "10-15 minutes",
    "learning_objectives": [
        "Understand how local election campaigns are organised",
        "Weigh grassroots and corporate campaign funding",
        "Recognise fair conduct on election day",
    ],
    "steps": [
        {
            "step": 1,
            "title": "Campaign Launch",
            "description": "You're running for district mayor. Choose your campaign platform:",
            "image": "🏛️",
            "choices": [
                {
                    "id": "A",
                    "text": "Focus on economic development and job creation",
                    "points": 20,
                    "feedback": "Great choice! Economic issues resonate with many voters.",
                    "consequences": "Business community shows support",
                },
                {
                    "id": "B",
                    "text": "Prioritize education and youth programs",
                    "points": 25,
                    "feedback": "Excellent! Education is a key concern for families.",
                    "consequences": "Teachers union endorses your campaign",
                },
                {
                    "id": "C",
                    "text": "Focus on infrastructure and public services",
                    "points": 15,
                    "feedback": "Good approach, though voters want more specific plans.",
                    "consequences": "Mixed response from community leaders",
                },
            ],
        },
        {
            "step": 2,
            "title": "Campaign Funding",
            "description": "You need to raise funds for your campaign. What's your strategy?",
            "image": "💰",
            "choices": [
                {
                    "id": "A",
                    "text": "Organize community fundraising events",
                    "points": 30,
                    "feedback": "Perfect! Grassroots funding builds strong community support.",
                    "consequences": "High community engagement and trust",
                },
                {
                    "id": "B",
                    "text": "Seek corporate sponsorships",
                    "points": 10,
                    "feedback": "This may raise questions about your independence.",
                    "consequences": "Some voters question your loyalties",
                },
                {
                    "id": "C",
                    "text": "Use personal savings and family support",
                    "points": 20,
                    "feedback": "Shows commitment, but limits your campaign reach.",
                    "consequences": "Limited campaign activities",
                },
            ],
        },
        {
            "step": 3,
            "title": "Voter Outreach",
            "description": "How will you connect with voters in your district?",
            "image": "🗳️",
            "choices": [
                {
                    "id": "A",
                    "text": "Door-to-door campaigning in all neighborhoods",
                    "points": 35,
                    "feedback": "Excellent! Personal connection is very effective.",
                    "consequences": "Strong rapport with diverse communities",
                },
                {
                    "id": "B",
                    "text": "Focus on social media and digital campaigns",
                    "points": 15,
                    "feedback": "Good for young voters, but may miss older demographics.",
                    "consequences": "Strong youth support, weaker with elderly",
                },
                {
                    "id": "C",
                    "text": "Organize town hall meetings",
                    "points": 25,
                    "feedback": "Great for detailed discussions, but limited reach.",
                    "consequences": "Deep engagement with interested voters",
                },
            ],
        },
        {
            "step": 4,
            "title": "Debate Preparation",
            "description": "The candidate debate is tomorrow. How do you prepare?",
            "image": "🎤",
            "choices": [
                {
                    "id": "A",
                    "text": "Study all local issues and prepare detailed policy responses",
                    "points": 30,
                    "feedback": "Excellent preparation shows competence and dedication.",
                    "consequences": "Strong debate performance",
                },
                {
                    "id": "B",
                    "text": "Focus on memorable sound bites and catchphrases",
                    "points": 10,
                    "feedback": "Style over substance may backfire with informed voters.",
                    "consequences": "Mixed debate reception",
                },
                {
                    "id": "C",
                    "text": "Practice answering tough questions with honesty",
                    "points": 25,
                    "feedback": "Honesty is valued, but you need specific solutions too.",
                    "consequences": "Voters appreciate authenticity",
                },
            ],
        },
        {
            "step": 5,
            "title": "Election Day Strategy",
            "description": "It's election day! What's your final push strategy?",
            "image": "📊",
            "choices": [
                {
                    "id": "A",
                    "text": "Coordinate volunteers to help voters get to polling stations",
                    "points": 35,
                    "feedback": "Perfect! Helping voters participate strengthens democracy.",
                    "consequences": "High voter turnout in your favor",
                },
                {
                    "id": "B",
                    "text": "Focus on last-minute advertising blitz",
                    "points": 15,
                    "feedback": "Some impact, but voters have mostly decided by now.",
                    "consequences": "Modest increase in name recognition",
                },
                {
                    "id": "C",
                    "text": "Visit polling stations to thank voters",
                    "points": 20,
                    "feedback": "Nice gesture, but be careful not to influence voters at polls.",
                    "consequences": "Some voters appreciate the personal touch",
                },
            ],
        },
    ],
}

_COMMUNITY_BUDGET = {
    "id": "2",
    "title": "Community Budget Planning",
    "description": "Allocate a district budget across competing community needs.",
    "category": "economic",
    "difficulty": "intermediate",
    "estimated_time": "10 minutes",
    "learning_objectives": [
        "Practise participatory budgeting",
        "Balance short-term and long-term public investment",
        "Present public spending transparently",
    ],
    "steps": [
        {
            "step": 1,
            "title": "Budget Assessment",
            "description": "The district has 100 million RWF. Review these priority areas needing funding:",
            "image": "📊",
            "choices": [
                {
                    "id": "A",
                    "text": "Conduct community surveys to understand priorities",
                    "points": 30,
                    "feedback": "Excellent! Community input ensures democratic budgeting.",
                    "consequences": "Clear understanding of community needs",
                },
                {
                    "id": "B",
                    "text": "Review last year's budget and make incremental changes",
                    "points": 15,
                    "feedback": "Safe approach, but may not address changing needs.",
                    "consequences": "Some outdated allocations remain",
                },
                {
                    "id": "C",
                    "text": "Focus on infrastructure as the top priority",
                    "points": 20,
                    "feedback": "Infrastructure is important, but balance is key.",
                    "consequences": "Strong infrastructure focus, other areas may suffer",
                },
            ],
        },
        {
            "step": 2,
            "title": "Education vs Healthcare",
            "description": (
                "Both education and healthcare need 40 million RWF, but you only have "
                "60 million left. How do you decide?"
            ),
            "image": "⚖️",
            "choices": [
                {
                    "id": "A",
                    "text": "Split equally: 30M each, find creative solutions for the gap",
                    "points": 25,
                    "feedback": "Balanced approach, but both sectors may be underfunded.",
                    "consequences": "Both sectors receive partial funding",
                },
                {
                    "id": "B",
                    "text": "Prioritize education (40M) and seek donor funding for healthcare",
                    "points": 30,
                    "feedback": "Good strategy! Education investment pays long-term dividends.",
                    "consequences": "Strong education investment, healthcare partnership developed",
                },
                {
                    "id": "C",
                    "text": "Prioritize healthcare (40M) as it's an immediate need",
                    "points": 25,
                    "feedback": "Healthcare is crucial, but education drives long-term development.",
                    "consequences": "Immediate health improvements, education gaps persist",
                },
            ],
        },
        {
            "step": 3,
            "title": "Infrastructure Investment",
            "description": (
                "Roads need repair (25M), clean water project needs 20M, and electricity "
                "expansion needs 15M. You have 40M left."
            ),
            "image": "🏗️",
            "choices": [
                {
                    "id": "A",
                    "text": "Water (20M) + Electricity (15M) - most impact on daily life",
                    "points": 35,
                    "feedback": "Excellent! Clean water and electricity improve quality of life most.",
                    "consequences": "Significant improvement in living standards",
                },
                {
                    "id": "B",
                    "text": "Roads (25M) + partial electricity (15M) - economic focus",
                    "points": 25,
                    "feedback": "Good for economic development, but water remains an issue.",
                    "consequences": "Economic activity increases, water challenges remain",
                },
                {
                    "id": "C",
                    "text": "Spread funds evenly across all three projects",
                    "points": 15,
                    "feedback": "Fair but may result in incomplete projects.",
                    "consequences": "All projects started but none fully completed",
                },
            ],
        },
        {
            "step": 4,
            "title": "Budget Presentation",
            "description": "Time to present your budget to the community. How do you approach this?",
            "image": "📋",
            "choices": [
                {
                    "id": "A",
                    "text": "Present detailed data with clear explanations and take questions",
                    "points": 35,
                    "feedback": "Perfect! Transparency and engagement build trust.",
                    "consequences": "Community fully supports the budget",
                },
                {
                    "id": "B",
                    "text": "Focus on major highlights and benefits",
                    "points": 20,
                    "feedback": "Good overview, but people may want more details.",
                    "consequences": "General approval but some unanswered questions",
                },
                {
                    "id": "C",
                    "text": "Present quickly and ask for quick approval",
                    "points": 10,
                    "feedback": "This approach may seem rushed and non-transparent.",
                    "consequences": "Community questions the process",
                },
            ],
        },
    ],
}

_CITIZENS_RIGHTS = {
    "id": "3",
    "title": "Citizens' Rights Workshop",
    "description": "Stand up for constitutional rights in everyday community situations.",
    "category": "citizenship",
    "difficulty": "beginner",
    "estimated_time": "10 minutes",
    "learning_objectives": [
        "Know the rights to free expression and to information",
        "Advocate for equal treatment in public services",
        "Spread civic education in your community",
    ],
    "steps": [
        {
            "step": 1,
            "title": "Freedom of Expression",
            "description": "You witness someone being silenced for expressing their opinion. What do you do?",
            "image": "🗣️",
            "choices": [
                {
                    "id": "A",
                    "text": "Speak up and cite their constitutional right to free expression",
                    "points": 30,
                    "feedback": "Brave! Defending rights in the moment is crucial.",
                    "consequences": "Others are encouraged to speak up too",
                },
                {
                    "id": "B",
                    "text": "Document the incident and report it to authorities later",
                    "points": 25,
                    "feedback": "Good documentation helps with accountability.",
                    "consequences": "Official investigation is launched",
                },
                {
                    "id": "C",
                    "text": "Do nothing to avoid conflict",
                    "points": 5,
                    "feedback": "Understandable but rights are protected when citizens act.",
                    "consequences": "Rights violations continue unchallenged",
                },
            ],
        },
        {
            "step": 2,
            "title": "Access to Information",
            "description": (
                "You need government documents for a community project but officials are "
                "being evasive. What's your approach?"
            ),
            "image": "📄",
            "choices": [
                {
                    "id": "A",
                    "text": "Submit formal request citing the Access to Information Law",
                    "points": 35,
                    "feedback": "Perfect! Using legal frameworks is the proper approach.",
                    "consequences": "Documents are provided within legal timeframe",
                },
                {
                    "id": "B",
                    "text": "Try to build personal relationships to get the information",
                    "points": 15,
                    "feedback": "May work but doesn't establish proper procedures.",
                    "consequences": "Inconsistent access, depends on relationships",
                },
                {
                    "id": "C",
                    "text": "Give up and look for alternative sources",
                    "points": 10,
                    "feedback": "You have the right to this information - don't give up!",
                    "consequences": "Important information remains inaccessible",
                },
            ],
        },
        {
            "step": 3,
            "title": "Equal Treatment",
            "description": (
                "You notice certain community members are being excluded from public "
                "services. How do you advocate for them?"
            ),
            "image": "⚖️",
            "choices": [
                {
                    "id": "A",
                    "text": "Organize community meetings to address discrimination",
                    "points": 30,
                    "feedback": "Great! Community action is powerful for change.",
                    "consequences": "Broader awareness and support for equal treatment",
                },
                {
                    "id": "B",
                    "text": "Report discrimination to human rights organizations",
                    "points": 25,
                    "feedback": "Good approach for systemic issues.",
                    "consequences": "Official investigation and policy changes",
                },
                {
                    "id": "C",
                    "text": "Help individuals access services without addressing the systemic issue",
                    "points": 15,
                    "feedback": "Helpful but doesn't solve the root problem.",
                    "consequences": "Temporary help but discrimination continues",
                },
            ],
        },
        {
            "step": 4,
            "title": "Civic Education",
            "description": "Many people in your community don't know their rights. How do you help?",
            "image": "📚",
            "choices": [
                {
                    "id": "A",
                    "text": "Organize regular community workshops on rights and responsibilities",
                    "points": 35,
                    "feedback": "Excellent! Education empowers communities.",
                    "consequences": "Community becomes more informed and active",
                },
                {
                    "id": "B",
                    "text": "Share information through social media and local networks",
                    "points": 25,
                    "feedback": "Good reach, but may miss those without digital access.",
                    "consequences": "Younger demographics become more aware",
                },
                {
                    "id": "C",
                    "text": "Focus on helping people individually as issues arise",
                    "points": 20,
                    "feedback": "Helpful but reactive rather than proactive.",
                    "consequences": "Some individuals helped but overall awareness remains low",
                },
            ],
        },
    ],
}

BUILTIN_SIMULATIONS: dict[str, Simulation] = {
    data["id"]: Simulation.model_validate(data)
    for data in (_LOCAL_ELECTION, _COMMUNITY_BUDGET, _CITIZENS_RIGHTS)
}
