"""
Simple usage example for GyanSathi

Teaches the engine a passage and a Q&A pair in a throwaway directory,
then asks a few questions.
"""

import tempfile

from gyansathi import RetrievalEngine, KnowledgeStorage


PASSAGE = (
    "রবীন্দ্রনাথ ঠাকুর ভারতের কলকাতা জেলার জোড়াসাঁকো শহরে জন্মগ্রহণ করেন। "
    "তিনি ১৮৬১ সালে জন্মগ্রহণ করেন। "
    "তার বাবার নাম দেবেন্দ্রনাথ ঠাকুর। "
    "তিনি ১৯৪১ সালে মৃত্যুবরণ করেন।"
)


def main():
    print("=" * 60)
    print("GyanSathi Simple Example")
    print("=" * 60)

    with tempfile.TemporaryDirectory() as tmp:
        engine = RetrievalEngine(storage=KnowledgeStorage(tmp))

        print("\n📝 Teaching a passage and a Q&A pair\n")
        engine.learn_from_text("রবীন্দ্রনাথ ঠাকুর", PASSAGE)
        engine.add_question_answer("তোমার নাম কি?", "আমার নাম সোফিয়া।")

        for question in [
            "তোমার নাম কি?",
            "রবীন্দ্রনাথ ঠাকুর কোথায় জন্মগ্রহণ করেন?",
            "রবীন্দ্রনাথ ঠাকুর কত সালে জন্মগ্রহণ করেন?",
            "রবীন্দ্রনাথ ঠাকুরের বাবার নাম কি?",
            "হ্যালো",
        ]:
            print(f"Question: {question}")
            print(f"Answer:   {engine.generate_response(question)}\n")

        print("=" * 60)
        print("\n📊 Statistics\n")
        print(engine.get_knowledge_stats())
        print(engine.get_conversation_insights())

    print("\n💡 To run the full CLI: gyansathi  (or: python -m gyansathi)")
    print("=" * 60)


if __name__ == "__main__":
    main()
