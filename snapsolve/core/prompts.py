from langchain_core.prompts import PromptTemplate

from snapsolve.models.types import Mode, StagePurpose

# --- Step A: extraction (vision) ---
CODING_EXTRACTION_SYSTEM = (
    "You are a coding challenge interpreter. Analyze the screenshot of the coding problem "
    "and extract all relevant information. Return the information in JSON format with these "
    "fields: problem_statement, constraints, example_input, example_output. Just return the "
    "structured JSON without any other text."
)
MCQ_EXTRACTION_SYSTEM = (
    "You are an expert in Computer Science and Quantitative Aptitude with deep knowledge of "
    "algorithms, data structures, databases, operating systems, networks, programming, and "
    "mathematical reasoning. Carefully read all multiple-choice questions (MCQs) shown in the "
    "screenshots and extract each question with its options. Questions may use different "
    "numbering styles and option markers (letters, numbers, or symbols). Return the "
    "information as JSON with an array of 'questions', where each question has: "
    "question_number, question_text, and options (key-value pairs of option letter and text). "
    "Just return the structured JSON without any other text."
)

CODING_EXTRACTION_PROMPT = PromptTemplate.from_template(
    "Extract the coding problem details from these screenshots. Return in JSON format. "
    "Preferred coding language we are going to use for this problem is {language}."
)
MCQ_EXTRACTION_PROMPT = PromptTemplate.from_template(
    "The questions may appear in different formats such as numbered (1., 2.), lettered "
    "(a., b.), or with other markers. Options might be listed as A/B/C/D, a)/b)/c)/d), "
    "1/2/3/4, or bullet points.\n\n"
    "Please identify all questions and their options carefully and return in this JSON format:\n"
    "{{\n"
    '  "questions": [\n'
    "    {{\n"
    '      "question_number": "1",\n'
    '      "question_text": "Full question text here",\n'
    '      "options": {{"A": "Text of option A", "B": "Text of option B", '
    '"C": "Text of option C", "D": "Text of option D"}}\n'
    "    }}\n"
    "  ]\n"
    "}}\n"
    "Preferred language for any code in the questions: {language}."
)

# --- Step B: synthesis ---
SOLUTION_SYSTEM = PromptTemplate.from_template(
    "You are a world-class software engineer preparing candidates for top-tier tech interviews.\n"
    "Your task is to solve the following problem in {language} such that:\n"
    "- The solution passes all visible and hidden test cases, including edge cases.\n"
    "- You provide a well-commented, clean implementation.\n"
    "- Your response contains no explanations before the code."
)
SOLUTION_PROMPT = PromptTemplate.from_template(
    "Give code that correctly passes all visible and hidden test cases and edge cases for "
    "the following coding problem. Before giving the final code, critically analyze your "
    "solution so no test case or edge case is missed.\n\n"
    "PROBLEM STATEMENT:\n{problem_statement}\n\n"
    "CONSTRAINTS:\n{constraints}\n\n"
    "EXAMPLE INPUT:\n{example_input}\n\n"
    "EXAMPLE OUTPUT:\n{example_output}\n\n"
    "LANGUAGE: {language}\n\n"
    "I need the response in the following format:\n"
    "1. Code: A clean implementation in {language} inside a fenced code block\n"
    "2. Your Thoughts: A list of key insights and reasoning behind your approach\n"
    "3. Time complexity: O(X) with a detailed explanation (at least 2 sentences)\n"
    "4. Space complexity: O(X) with a detailed explanation (at least 2 sentences)\n\n"
    'For example: "Time complexity: O(n) because we iterate through the array only once. '
    'This is optimal as we need to examine each element at least once."'
)

MCQ_SOLUTION_SYSTEM = (
    "You are an expert MCQ analyzer. Provide clear, accurate answers with detailed explanations."
)
MCQ_ANSWER_PROMPT = PromptTemplate.from_template(
    "Analyze the following multiple choice questions:\n\n"
    "{questions_json}\n\n"
    "For each question, provide:\n"
    "1. The correct answer (A, B, C, or D)\n"
    "2. A detailed explanation of why this answer is correct\n"
    "3. Brief analysis of why each other option is incorrect\n"
    "4. Key concepts being tested in this question\n\n"
    "Format your response as JSON with this structure:\n"
    "{{\n"
    '  "answers": [\n'
    "    {{\n"
    '      "question_number": "1",\n'
    '      "question_text": "The full text of the question",\n'
    '      "options": {{"A": "...", "B": "...", "C": "...", "D": "..."}},\n'
    '      "correct_answer": "A",\n'
    '      "explanation": "detailed explanation",\n'
    '      "analysis": {{"A": "why A is correct", "B": "why B is wrong", '
    '"C": "why C is wrong", "D": "why D is wrong"}},\n'
    '      "key_concepts": ["concept1", "concept2"]\n'
    "    }}\n"
    "  ]\n"
    "}}"
)

# --- Step C: debug ---
DEBUG_SYSTEM = (
    "You are a coding interview assistant helping debug and improve solutions. Analyze these "
    "screenshots which include either error messages, incorrect outputs, or test cases, and "
    "provide detailed debugging help.\n\n"
    "Your response MUST follow this exact structure with these section headers (use ### for headers):\n"
    "### Issues Identified\n- List each issue as a bullet point with clear explanation\n\n"
    "### Specific Improvements and Corrections\n- List specific code changes needed as bullet points\n\n"
    "### Optimizations\n- List any performance optimizations if applicable\n\n"
    "### Explanation of Changes Needed\nHere provide a clear explanation of why the changes are needed\n\n"
    "### Key Points\n- Summary bullet points of the most important takeaways\n\n"
    "If you include code examples, use proper markdown code blocks with language "
    "specification (e.g. ```java)."
)
DEBUG_PROMPT = PromptTemplate.from_template(
    'I\'m solving this problem: "{problem}" in {language}. I need help with debugging or '
    "improving my solution. Here are screenshots of my code, the errors or test cases. "
    "Please provide a detailed analysis with:\n"
    "1. What issues you found in my code\n"
    "2. Specific improvements and corrections\n"
    "3. Any optimizations that would make the solution better\n"
    "4. A clear explanation of the changes needed{notes_section}"
)
NOTES_HEADER = "\n\nAdditional context provided by the user:\n"


def system_prompt_for(purpose: StagePurpose, mode: Mode, language: str) -> str:
    """System prompt for a stage call in the given mode."""
    if purpose == StagePurpose.EXTRACTION:
        return MCQ_EXTRACTION_SYSTEM if mode == Mode.MCQ else CODING_EXTRACTION_SYSTEM
    if purpose == StagePurpose.SOLUTION:
        if mode == Mode.MCQ:
            return MCQ_SOLUTION_SYSTEM
        return SOLUTION_SYSTEM.format(language=language)
    return DEBUG_SYSTEM


def extraction_prompt(mode: Mode, language: str) -> str:
    template = MCQ_EXTRACTION_PROMPT if mode == Mode.MCQ else CODING_EXTRACTION_PROMPT
    return template.format(language=language)


def notes_section(notes) -> str:
    texts = [n.text for n in notes if n.text and n.text.strip()]
    if not texts:
        return ""
    return NOTES_HEADER + "\n\n".join(texts)
