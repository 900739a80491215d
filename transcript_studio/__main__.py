"""Package entry point for ``python -m transcript_studio``.

WHY: Users run the converter as ``python -m transcript_studio transcript.txt``
for CLI mode, or ``python -m transcript_studio --serve`` to start the HTTP
API. Python's ``-m`` flag looks for ``__main__.py`` inside the package and
executes it.

HOW: Checks sys.argv for the ``--serve`` flag. If present, starts the
FastAPI app under uvicorn. Otherwise, delegates to the CLI's main().
"""

import sys

if __name__ == "__main__":
    if "--serve" in sys.argv:
        from transcript_studio.server.app import run_api
        run_api()
    else:
        from transcript_studio.cli import main
        main()
