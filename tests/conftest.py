import pytest

from gyansathi.engine import RetrievalEngine
from gyansathi.knowledge import KnowledgeStorage
from gyansathi.responses import AnswerSynthesizer, FirstSelector


@pytest.fixture
def storage(tmp_path):
    return KnowledgeStorage(tmp_path / "knowledge")


@pytest.fixture
def engine(storage):
    return RetrievalEngine(storage=storage, synthesizer=AnswerSynthesizer(FirstSelector()))


@pytest.fixture
def tagore_text():
    return (
        "রবীন্দ্রনাথ ঠাকুর ভারতের কলকাতা জেলার জোড়াসাঁকো শহরে জন্মগ্রহণ করেন। "
        "তিনি ১৮৬১ সালে জন্মগ্রহণ করেন। "
        "তার বাবার নাম দেবেন্দ্রনাথ ঠাকুর।"
    )
