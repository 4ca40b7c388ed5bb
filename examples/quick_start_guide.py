#!/usr/bin/env python3
"""
Quick Start Guide for the phyloXML parser.

This example walks through parsing a document, navigating the resulting
trees, incremental parsing and error reporting.
"""

import asyncio
import json
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from lxml import etree

from phyloxml_parser import (
    ParserConfig,
    PhyloXMLError,
    PhyloXMLParser,
    parse_async,
    parse_incremental,
    parse_string,
)

SAMPLE = """<?xml version="1.0" encoding="UTF-8"?>
<phyloxml xmlns="http://www.phyloxml.org">
  <phylogeny rooted="true">
    <name>Alcohol dehydrogenases</name>
    <clade>
      <clade branch_length="0.18">
        <name>ADHX</name>
        <confidence type="bootstrap">100</confidence>
        <taxonomy><code>HUMAN</code><scientific_name>Homo sapiens</scientific_name></taxonomy>
        <sequence type="protein">
          <accession source="UniProtKB">P11766</accession>
          <domain_architecture length="374">
            <domain from="1" to="374" confidence="1.0E-5">ADH_N</domain>
          </domain_architecture>
        </sequence>
      </clade>
      <clade branch_length="0.07">
        <name>ADH1</name>
        <taxonomy><code>YEAST</code><scientific_name>Saccharomyces cerevisiae</scientific_name></taxonomy>
      </clade>
    </clade>
  </phylogeny>
  <phylogeny rooted="false">
    <name>Tiny</name>
    <clade><clade><name>A</name></clade><clade><name>B</name></clade></clade>
  </phylogeny>
</phyloxml>
"""


def quick_start_example():
    """Quick start example showing basic usage."""

    print("🚀 QUICK START - phyloXML parser")
    print("=" * 40)

    # Step 1: Parse a document
    print("\n📄 Step 1: Parsing")
    print("-" * 30)

    trees = parse_string(SAMPLE)
    print(f"✅ Parsed {len(trees)} phylogenies")

    # Step 2: Navigate the first tree
    print("\n🧭 Step 2: Navigation")
    print("-" * 30)

    tree = trees[0]
    print(f"🌳 {tree.name}: {tree.clade_count} clades, {tree.leaf_count} leaves, "
          f"depth {tree.max_depth}")
    for leaf in tree.root.leaves():
        species = leaf.taxonomies[0].scientific_name if leaf.taxonomies else "?"
        print(f"  - {leaf.name} ({species}), branch length {leaf.branch_length}")

    adhx = tree.find("ADHX")
    if adhx and adhx.sequences:
        sequence = adhx.sequences[0]
        domain = sequence.domain_architecture.domains[0]
        print(f"🧬 {sequence.accession.source}:{sequence.accession.value}, "
              f"domain {domain.name} {domain.from_}-{domain.to}")

    # Step 3: Convert to JSON
    print("\n🔄 Step 3: JSON output")
    print("-" * 30)
    print(json.dumps(trees[1].to_dict(), indent=2))

    print("\n🎉 Quick start complete!")


def incremental_example():
    """Example showing chunked parsing with progress reporting."""

    print("\n\n📦 INCREMENTAL PARSING EXAMPLE")
    print("=" * 40)

    chunks = [SAMPLE[i:i + 128] for i in range(0, len(SAMPLE), 128)]

    def report(progress):
        print(f"  ... {progress.processed_chunks} chunks, "
              f"{progress.phylogenies_completed} trees")

    config = ParserConfig.default().override(streaming__progress_interval=4)
    for tree in parse_incremental(chunks, config=config, progress_callback=report):
        print(f"🌳 Completed '{tree.name}' with {tree.clade_count} clades")

    async def read_chunks():
        for chunk in chunks:
            await asyncio.sleep(0)
            yield chunk

    async def collect():
        return [tree.name async for tree in parse_async(read_chunks())]

    print(f"⚡ Async parse: {asyncio.run(collect())}")


def error_reporting_example():
    """Example showing how parse failures are reported."""

    print("\n\n❗ ERROR REPORTING EXAMPLE")
    print("=" * 40)

    documents = [
        ("accession outside sequence",
         "<phyloxml><phylogeny><clade><accession>X</accession></clade></phylogeny></phyloxml>"),
        ("malformed branch length",
         "<phyloxml><phylogeny><clade branch_length='long'/></phylogeny></phyloxml>"),
        ("not well-formed",
         "<phyloxml><phylogeny><clade><name>A</name></clade></phylogeny><phylogeny>"
         "<clade></phylogeny></phyloxml>"),
    ]

    for description, document in documents:
        parser = PhyloXMLParser()
        try:
            parser.parse(document)
        except PhyloXMLError as e:
            print(f"📋 {description}: {type(e).__name__}: {e}")
        except etree.XMLSyntaxError as e:
            print(f"📋 {description}: XMLSyntaxError: {e}")
        print(f"  Trees completed before the error: {len(parser.phylogenies)}")

    print(f"\n📊 Statistics: {PhyloXMLParser().statistics}")


def main():
    """Main function."""
    try:
        quick_start_example()
        incremental_example()
        error_reporting_example()

        print("\n✅ All examples completed successfully!")
        return 0

    except (PhyloXMLError, etree.XMLSyntaxError) as e:
        print(f"\n❌ Example failed: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
