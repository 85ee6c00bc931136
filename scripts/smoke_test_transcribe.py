"""Run the provider chain against a local media file, outside any request.

Usage:
  python scripts/smoke_test_transcribe.py path/to/audio.mp3 [content-type]

Uses the API keys from the environment / .env exactly as the web app does and
prints which provider answered plus the first subtitle cues.
"""

import mimetypes
import os
import sys

# ensure project root is on sys.path when running from scripts/ or other cwd
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from mobytranscript import create_app
from mobytranscript.services.orchestrator import TranscriptionFailed, TranscriptionOrchestrator
from mobytranscript.services.providers import build_providers
from mobytranscript.services.subtitles import build_cues, render


def main(argv):
    if len(argv) < 2:
        print(__doc__)
        return 2
    path = argv[1]
    content_type = argv[2] if len(argv) > 2 else (mimetypes.guess_type(path)[0] or 'audio/mpeg')

    app = create_app()
    with app.app_context():
        providers = build_providers(app.config)
        print('configured providers:', [p.name for p in providers if p.is_configured()] or 'none')
        with open(path, 'rb') as f:
            audio = f.read()
        try:
            result = TranscriptionOrchestrator(providers, logger=app.logger).run(audio, content_type)
        except TranscriptionFailed as e:
            print('FAILED:', e.message)
            for name, err in e.errors.items():
                print(f'  {name}: {err}')
            return 1

    print('provider:', result.provider, '| transcript_id:', result.transcript_id)
    print(result.text[:1000])
    print()
    print(render(build_cues(result.text)[:5], 'srt'))
    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv))
