"""
AI prompt templates for the written exam grader.

The grader sends the question sheet and the answer photos along with
one of these prompts and asks for a JSON answer.
"""


def build_grading_prompt(num_images: int) -> str:
    """
    Build the grading prompt.

    Args:
        num_images: Number of answer sheet photos attached to the request

    Returns:
        Prompt text
    """
    return f"""You are an expert teacher grading a student's answer sheet.

I will provide you with:
1. The question sheet (with correct answers) as a PDF
2. {num_images} photo(s) of the student's handwritten answer sheet

Your task:
- Extract all questions, their correct answers, AND THE SCORE/POINTS for each question from the question sheet PDF
- Read the student's handwritten answers from the photo(s) - the answers may be spread across multiple images
- Compare each answer and determine if it's correct
- Assign a score for each question (can be partial credit)
- Provide concise explanations for each grade if the answer is incorrect or partially correct
- Calculate the total score (sum of all earned scores)

Please be fair and understanding:
- Accept answers that are semantically equivalent even if worded differently
- For math problems, accept different solution methods if they arrive at the correct answer
- Give partial credit when the student shows correct work or partial understanding
- Be specific about what was correct or incorrect in the student's answer
- If answers are spread across multiple images, combine them logically

Return a structured result with:
- For each question: question number, correctness, explanation, student's answer, correct answer, max score for the question, and earned score
- Total score earned (sum of all earned scores)
- Maximum possible score (sum of all max scores)
- Overall comments about the student's performance

IMPORTANT: Extract the score/points for each question from the question sheet. The total score may not be 100."""


def build_validation_prompt(num_images: int) -> str:
    """Build the prompt asking whether the images are answer sheets."""
    return f"""You are an expert at analyzing images to determine if they are student answer sheets for exams.

Your task is to examine {num_images} image(s) and determine if they appear to be handwritten exam answer sheets or similar academic work.

Valid answer sheets typically contain:
- Handwritten text or answers
- Question numbers or sections
- Student work on paper
- Mathematical equations, diagrams, or written responses
- Exam-like formatting

Invalid images might be:
- Group photos of people
- Dinner photos or food pictures
- Selfies or portraits
- Screenshots of unrelated content
- Completely blank pages
- Non-academic content

Please analyze all provided images and determine:
1. Whether they appear to be student answer sheets (true/false)
2. A clear explanation of your reasoning
3. Your confidence level (0-1, where 1 is very confident)

Be strict but reasonable - if most images look like answer sheets but one might be unclear, consider the overall set."""
