#!/usr/bin/env python3
"""
Example 1: Script search with citations and the evidence gate

This example demonstrates:
- Storing a few embedded passages in a file store
- Searching with episode and character filters
- Grouping results by episode
- Gating a generated answer when no evidence is found

Requirements:
    pip install cicada-retrieval
    export OPENAI_API_KEY=sk-...
"""

import os
import tempfile

if not os.environ.get("OPENAI_API_KEY"):
    print("Set OPENAI_API_KEY environment variable")
    print("   export OPENAI_API_KEY=sk-...")
    exit(1)

from cicada import (
    AnswerGenerator,
    Cicada,
    CicadaConfig,
    FilePassageStore,
    Passage,
    SearchOptions,
    create_embedding_provider,
    format_search_results,
)


LINES = [
    ("onikakushi", "Onikakushi", "ch1", 1, "Rena", "I'll take it home! Hau~"),
    ("onikakushi", "Onikakushi", "ch4", 212, "Rena", "Liar! You're lying!"),
    ("watanagashi", "Watanagashi", "ch2", 37, "Mion", "The festival is tonight, Kei-chan."),
    ("watanagashi", "Watanagashi", "ch5", 90, None, "Ooishi asks about Rena's past."),
]


class EchoGenerator(AnswerGenerator):
    """Stands in for an LLM: lists the cited lines."""

    def generate(self, query, citations, groups):
        if not citations:
            return "Nothing in the script answers this directly."
        return " ".join(f"{c.episode_name} {c.chapter_id}: {c.text_eng}" for c in citations)


def main():
    embedder = create_embedding_provider("openai", "text-embedding-3-small")
    data_dir = tempfile.mkdtemp(prefix="cicada_example_")
    store = FilePassageStore(data_dir)

    print(f"Storing {len(LINES)} passages in {data_dir}")
    vectors = embedder.embed([line[-1] for line in LINES])
    for i, ((episode_id, name, chapter_id, message_id, speaker, text), vector) in enumerate(zip(LINES, vectors)):
        store.add(Passage(
            id=f"{episode_id}-{i}",
            episode_id=episode_id,
            chapter_id=chapter_id,
            message_id=message_id,
            text_eng=text,
            embedding=tuple(vector),
            speaker=speaker,
            metadata={"episodeName": name},
        ))

    cicada = Cicada(CicadaConfig(data_dir=data_dir, default_min_score=0.2), embedder=embedder, store=store)

    print("\n=== Character search: Rena ===")
    response = cicada.search(
        "Why is Rena angry?",
        SearchOptions.build(top_k=5, min_score=0.2, character="Rena"),
        group=True,
    )
    for episode_id, results in response.groups.items():
        print(f"--- {episode_id} ---")
        print(format_search_results(results))

    print("\n=== Answer without evidence ===")
    answer = cicada.answer(
        "What happens in Minagoroshi?",
        EchoGenerator(),
        SearchOptions.build(episode_ids=["minagoroshi"]),
    )
    print(answer.content)
    print(f"has_direct_evidence={answer.has_direct_evidence}")


if __name__ == "__main__":
    main()
