import json

from django.core.management.base import BaseCommand, CommandError
from django.core.serializers.json import DjangoJSONEncoder

from core.audit.errors import NotFound
from core.audit.store import SnapshotStore


class Command(BaseCommand):
    help = "Print the revision history of a tracked entity (or its state at one revision)"

    def add_arguments(self, parser):
        parser.add_argument("entity_type", help="Tracked model name, e.g. Company")
        parser.add_argument("entity_id")
        parser.add_argument("--revision", type=int, default=None, help="Show the state as of this revision")

    def handle(self, *args, **options):
        store = SnapshotStore()
        entity_type = options["entity_type"]
        entity_id = options["entity_id"]

        try:
            if options["revision"] is not None:
                snapshots = [store.as_of(entity_type, entity_id, options["revision"])]
            else:
                snapshots = list(store.history_of(entity_type, entity_id))
        except NotFound as exc:
            raise CommandError(str(exc)) from exc

        if not snapshots:
            raise CommandError(f"{entity_type}#{entity_id} has no history")

        for s in snapshots:
            state = json.dumps(s.field_state, cls=DjangoJSONEncoder, sort_keys=True)
            self.stdout.write(f"r{s.revision_id}\t{s.change_kind}\t{s.timestamp.isoformat()}\t{s.actor}\t{state}")
