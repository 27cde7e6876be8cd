"""Management command to analyse specimen photographs via the service layer."""

from __future__ import annotations

import base64
import uuid
from pathlib import Path
from typing import Optional

from apps.artifacts.services.analysis import (
    AnalysisFailedError,
    AnalysisInput,
    NoImagesProvidedError,
    analyze_artifact,
)
from django.core.management.base import BaseCommand, CommandError


class Command(BaseCommand):
    help = "Analyse one or more artifact photographs and catalogue the result"

    def add_arguments(self, parser):  # type: ignore[override]
        parser.add_argument("images", nargs="+", help="Image files, primary first")
        parser.add_argument("--notes", dest="notes", default=None, help="Excavation notes")
        parser.add_argument("--lat", dest="lat", type=float, default=None)
        parser.add_argument("--lng", dest="lng", type=float, default=None)
        parser.add_argument(
            "--owner",
            dest="owner",
            type=uuid.UUID,
            default=None,
            help="Profile id to own the artifact (defaults to anonymous)",
        )

    def handle(self, *args, **options):  # type: ignore[override]
        if (options["lat"] is None) != (options["lng"] is None):
            raise CommandError("--lat and --lng must be given together")

        images = [self._encode(Path(name)) for name in options["images"]]
        location: Optional[tuple[float, float]] = None
        if options["lat"] is not None:
            location = (options["lat"], options["lng"])

        try:
            outcome = analyze_artifact(
                AnalysisInput(
                    images=images,
                    notes=options["notes"],
                    location=location,
                    owner_id=options["owner"],
                )
            )
        except NoImagesProvidedError as exc:
            raise CommandError(str(exc)) from exc
        except AnalysisFailedError as exc:
            self.stderr.write(self.style.ERROR(f"Analysis Protocol Failed: {exc.detail}"))
            return

        for failed in outcome.images_failed:
            self.stderr.write(self.style.WARNING(f"Image {failed.index} skipped: {failed.reason}"))

        report = outcome.report
        self.stdout.write(
            self.style.SUCCESS(
                f"Catalogued artifact {outcome.artifact.id}: {report.title} "
                f"({report.confidence_score:.0%} confidence, "
                f"{len(outcome.images_attached)} image(s))"
            )
        )

    @staticmethod
    def _encode(path: Path) -> str:
        try:
            return base64.b64encode(path.read_bytes()).decode("ascii")
        except OSError as exc:
            raise CommandError(f"Cannot read {path}: {exc}") from exc
