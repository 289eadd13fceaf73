"""
Adaptive quiz example: Load Pool → Start Attempt → Answer → Results

Demonstrates the assessment workflow end to end:
1. Load and validate a question pool
2. Start an adaptive attempt
3. Submit answers and watch the selection adapt
4. Complete the attempt with score, knowledge gaps and recommendations
"""

import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from quizadapt.config import config
from quizadapt.orchestrator import AssessmentOrchestrator
from quizadapt.utils.pool_loader import load_question_pool

POOL = [
    {"id": "u1", "difficulty": 1, "topic": "units", "question_type": "true_false",
     "question_text": "1 L equals 1000 mL.", "correct_answer": "true"},
    {"id": "m1", "difficulty": 2, "topic": "moles", "question_type": "numerical",
     "question_text": "Avogadro's number (x 10^23)?", "correct_answer": "6.022", "tolerance": 0.01},
    {"id": "m2", "difficulty": 2, "topic": "moles", "question_type": "multiple_choice",
     "question_text": "Molar mass of water?", "options": ["16 g/mol", "18 g/mol", "20 g/mol"],
     "correct_answer": "18 g/mol"},
    {"id": "s1", "difficulty": 3, "topic": "stoichiometry", "question_type": "multiple_choice",
     "question_text": "Which reagent limits the reaction?", "options": ["A", "B"],
     "correct_answer": "B", "points": 2},
    {"id": "s2", "difficulty": 3, "topic": "stoichiometry", "question_type": "multiple_choice",
     "question_text": "Which are balanced?", "options": ["A", "B", "C", "D"],
     "correct_answer": ["A", "C"], "points": 2},
    {"id": "e1", "difficulty": 4, "topic": "equilibrium", "question_type": "short_answer",
     "question_text": "What happens when pressure rises?", "correct_answer": ["le chatelier", "shift"],
     "points": 3},
    {"id": "k1", "difficulty": 5, "topic": "kinetics", "question_type": "numerical",
     "question_text": "Rate constant in 1/s?", "correct_answer": "0.35", "tolerance": 0.05,
     "points": 3},
]

ANSWERS = {
    "u1": "true",
    "m1": "6.02",
    "m2": "16 g/mol",
    "s1": "B",
    "s2": ["A"],
    "e1": "the equilibrium will shift",
    "k1": "0.7",
}


def main():
    config.configure_logging()

    # ==================== Step 1: Load Question Pool ====================
    print("=" * 60)
    print("STEP 1: Loading Question Pool")
    print("=" * 60)

    pool = load_question_pool(POOL)
    print(f"✓ Loaded {len(pool)} questions across topics: {', '.join(pool.topics())}")
    print()

    # ==================== Step 2: Start Attempt ====================
    print("=" * 60)
    print("STEP 2: Starting Adaptive Attempt")
    print("=" * 60)

    orchestrator = AssessmentOrchestrator()
    attempt_id = orchestrator.start_attempt(pool, learner_id="demo-learner", max_questions=4)
    print(f"✓ Attempt: {attempt_id}")
    for question in orchestrator.selected_questions(attempt_id):
        print(f"  - {question['id']} (difficulty {question['difficulty']}, {question['topic']})")
    print()

    # ==================== Step 3: Answer Questions ====================
    print("=" * 60)
    print("STEP 3: Answering Questions")
    print("=" * 60)

    while True:
        question = orchestrator.next_question(attempt_id)
        if question is None:
            break
        result = orchestrator.submit_answer(attempt_id, question["id"], ANSWERS[question["id"]])
        mark = "✓" if result["is_correct"] else "✗"
        print(
            f"{mark} {question['id']}: score {result['score']:.0f}, "
            f"ability {result['ability']:.2f}, gaps {result['knowledge_gaps']}"
        )

    selection = [q["id"] for q in orchestrator.selected_questions(attempt_id)]
    print(f"  Final selection: {selection}")
    print()

    # ==================== Step 4: Results ====================
    print("=" * 60)
    print("STEP 4: Attempt Results")
    print("=" * 60)

    results = orchestrator.complete_attempt(attempt_id)
    print(json.dumps(results, indent=2))


if __name__ == "__main__":
    main()
