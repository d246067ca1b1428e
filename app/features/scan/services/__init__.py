"""
Scan Services

Organized by pipeline stage:

1. extraction/ - Browser session and page text
   - page_loader_service.py: headless Chrome session, navigation, clipped screenshots
   - page_scripts.py: versioned page-side helper payload (search + highlight)
   - text_extractor.py: visible text, normalisation, length checks

2. analysis/ - LLM passes and deterministic filtering
   - model_providers.py: OpenAI / Gemini backends behind one contract
   - correction_generator.py: primary LLM pass, cached
   - plausibility_filter.py: rejects low-confidence, oversized, absent or duplicate corrections
   - correction_validator.py: second LLM pass, cached

3. injection/ - Highlighting on the live page
   - dom_injector.py: highlight each correction and capture its screenshot
   - severity_styles.py: severity -> highlight colours

4. storage/ - Filesystem
   - screenshot_store.py: one PNG per persisted correction

5. orchestration/ - Run lifecycle
   - workflow.py: the stage machine, progress events, failure policy
   - run_repository.py: run and correction rows

6. reports/ - Read side
   - report_service.py: list, fetch and delete reports
"""
