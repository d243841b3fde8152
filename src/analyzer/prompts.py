"""Default prompt templates for email analysis."""

SYSTEM_PROMPT = """You are an expert email triage assistant. You analyze a single email at a time.

Always respond with exactly one JSON object matching the format requested by the user.
Do not wrap the JSON in markdown code fences and do not add any text before or after it."""


IMPORTANCE_PROMPT_TEMPLATE = """Analyze the importance of this email on a scale of 1-10.

IMPORTANCE SCALE:
- 1-2: Spam, newsletters, automated notifications
- 3-4: Social media, promotions, casual conversations
- 5-6: Work updates, regular communications, scheduling
- 7-8: Urgent work matters, deadlines, important decisions
- 9-10: Emergencies, messages from managers or key clients, time-critical actions

ANALYSIS FACTORS:
- Sender authority (manager, client, colleague)
- Urgency indicators (URGENT, ASAP, deadline)
- Action requirements (response needed, task assigned)
- Business impact (revenue, projects, relationships)
- Time sensitivity (today, this week, immediate)

EMAIL CONTENT:
{content}

Respond with a JSON object in this exact format:
{{
    "importance": 7,
    "reasoning": "Brief explanation of the score",
    "urgency": "low|medium|high|critical"
}}"""


SUMMARY_PROMPT_TEMPLATE = """Create a concise, actionable summary of this email.

SUMMARIZATION GUIDELINES:
- Maximum 2 sentences for the summary
- Focus on key decisions, requests, or information
- Highlight any deadlines or next steps
- Extract at most 5 key points

EMAIL CONTENT:
{content}

Respond with a JSON object in this exact format:
{{
    "summary": "Brief 1-2 sentence summary",
    "keyPoints": ["First key point", "Second key point"],
    "tone": "professional|casual|urgent|friendly|formal|neutral"
}}"""


ACTION_ITEMS_PROMPT_TEMPLATE = """Identify all action items, tasks, and requests in this email.
Focus on things that require the recipient to DO something.

EXTRACTION CRITERIA:
- Explicit tasks ("Please do X", "Can you Y")
- Implicit requests ("We need to discuss", "Should we consider")
- Deadlines and time-sensitive items
- Follow-up requirements
- Decision points requiring input

EMAIL CONTENT:
{content}

Respond with a JSON object in this exact format:
{{
    "actionItems": [
        {{
            "task": "Description of what needs to be done",
            "deadline": "YYYY-MM-DD or 'no deadline'",
            "priority": "low|medium|high",
            "assignee": "me|sender|other",
            "category": "work|personal|administrative"
        }}
    ],
    "hasDeadlines": true or false,
    "requiresResponse": true or false
}}"""


SENTIMENT_PROMPT_TEMPLATE = """Analyze the sentiment and emotional tone of this email.

EMAIL CONTENT:
{content}

Respond with a JSON object in this exact format:
{{
    "sentiment": "positive|negative|neutral",
    "emotion": "happy|angry|frustrated|excited|worried|satisfied|neutral",
    "confidence": 0.0 to 1.0,
    "isComplaint": true or false,
    "isPraise": true or false
}}"""


CLASSIFICATION_PROMPT_TEMPLATE = """Classify this email based on its subject and content.

CLASSIFICATION CATEGORIES:
- Primary: work, personal, finance, travel, shopping, social, news, marketing, spam
- Secondary: meetings, deadlines, requests, updates, decisions, reports

BUSINESS RELEVANCE:
- high: Direct work tasks, client communications, urgent decisions
- medium: Team updates, scheduled meetings, informational content
- low: Newsletters, promotions, casual conversations

SUBJECT: {subject}
EMAIL CONTENT:
{content}

Respond with a JSON object in this exact format:
{{
    "primaryCategory": "work",
    "secondaryCategories": ["meetings", "deadlines"],
    "isAutomated": true or false,
    "isNewsletter": true or false,
    "isPromotion": true or false,
    "businessRelevance": "high|medium|low"
}}"""


SMART_FILTER_PROMPT_TEMPLATE = """Determine whether this email matches the filter criteria below.

FILTER CRITERIA: {criteria}

EMAIL CONTENT:
{content}

FILTERING RULES:
- Exact match: must contain the specified keywords
- Semantic match: similar meaning or intent
- Sender-based: from the specified people or domains
- Content-based: type of information or request
- Time-based: urgency or deadline requirements

Respond with a JSON object in this exact format:
{{
    "matches": true or false,
    "matchedCriteria": ["urgent", "from_boss"],
    "confidence": 0.0 to 1.0,
    "filterReason": "Why the email does or does not match",
    "suggestedFolder": "Priority Inbox",
    "autoActions": ["mark_important", "add_flag"]
}}"""
