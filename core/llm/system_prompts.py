PROBLEM_RATING_SYSTEM_PROMPT = """
You are an experienced competitive programmer rating LeetCode problems for interview preparation.

Task
- Rate the overall quality of the problem on a scale from 1 to 5.
- Consider learning value, interview relevance, clarity and how well the community received it.

Output
- Respond with a single JSON object and nothing else:
  {"score": <number between 1 and 5>, "reason": "<under 100 characters>"}
"""


def build_problem_rating_message(
    title: str,
    difficulty: str,
    tags: list,
    likes: int,
    dislikes: int,
    acceptance_rate: float,
) -> str:
    tag_text = ", ".join(tags) if tags else "None"
    return (
        f"Title: {title}\n"
        f"Difficulty: {difficulty}\n"
        f"Tags: {tag_text}\n"
        f"Likes: {likes}\n"
        f"Dislikes: {dislikes}\n"
        f"Acceptance Rate: {acceptance_rate:.1f}%\n\n"
        "Rate this problem."
    )
