import logging

from django.apps import apps
from django.conf import settings
from django.http import JsonResponse
from django.utils import timezone
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from . import intake
from .catalog.registry import MEDICINES, TESTS
from .exception_handler import unified_exception_handler
from .exceptions import NotFoundError, UpstreamUnavailableError
from .llm.factory import get_llm_service
from .search.context import ClinicalContext
from .search.pipeline import SearchPipeline
from .search.types import EntryKind
from .serializers import (
    serialize_medication_detail,
    serialize_outcome,
    serialize_test_detail,
)

logger = logging.getLogger(__name__)


def _now():
    return timezone.now().isoformat()


class ExceptionHandlerMixin:
    """
    把 BaseAppException / DRF ValidationError 转成统一 JSON 响应。

    View 里只管 raise；其他异常不处理，照常冒泡（Django 返回 500）。
    """

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except Exception as exc:
            response = unified_exception_handler(exc, context=type(self).__name__)
            if response is None:
                raise
            return response


class CatalogViewMixin:
    """
    registry 可以通过 as_view(registry=...) 注入；
    不注入时使用 AppConfig.ready() 里加载的进程级 registry。
    """

    registry = None

    def get_registry(self):
        return self.registry or apps.get_app_config('rxsearch').registry

    def get_pipeline(self) -> SearchPipeline:
        config = apps.get_app_config('rxsearch')
        return SearchPipeline(
            self.get_registry(),
            policy=config.policy,
            default_limit=settings.SEARCH_DEFAULT_LIMIT,
        )


@method_decorator(csrf_exempt, name='dispatch')
class MedicineAutocompleteView(ExceptionHandlerMixin, CatalogViewMixin, View):
    """
    POST /api/autocomplete/medicines/ - heuristic suggestions with clinical context
    GET  /api/autocomplete/medicines/?q=&category=&limit= - flat local search
    """

    def post(self, request):
        data = intake.validate(intake.MedicineAutocompleteRequest, intake.parse_json_body(request))
        text = data['text']
        limit = data.get('limit')
        pipeline = self.get_pipeline()

        try:
            outcome = pipeline.autocomplete_medications(text, data.get('context'), limit)
        except Exception:
            # 启发式路径出错时退回本地 store 搜索，响应里标记 fallback
            logger.exception("[MedicineAutocompleteView] suggestion pipeline failed for %r", text)
            outcome = pipeline.local_suggestions(MEDICINES, text, limit)
            return JsonResponse(serialize_outcome(outcome, text, _now(), fallback=True))

        return JsonResponse(serialize_outcome(outcome, text, _now()))

    def get(self, request):
        params = intake.validate(intake.CatalogQueryParams, request.GET)
        limit = params.get('limit')
        if limit is None:
            limit = settings.SEARCH_GET_DEFAULT_LIMIT
        category = params['category']

        outcome = self.get_pipeline().local_suggestions(MEDICINES, params['q'], limit, category=category)
        return JsonResponse(serialize_outcome(outcome, params['q'], _now(), category=category or None))


@method_decorator(csrf_exempt, name='dispatch')
class TestAutocompleteView(ExceptionHandlerMixin, CatalogViewMixin, View):
    """
    POST /api/autocomplete/tests/ - ranked test suggestions
    GET  /api/autocomplete/tests/?q=&category=&type=&limit= - flat local search
    """

    def post(self, request):
        data = intake.validate(intake.TestAutocompleteRequest, intake.parse_json_body(request))
        outcome = self.get_pipeline().autocomplete_tests(data['text'], data.get('limit'))
        return JsonResponse(serialize_outcome(outcome, data['text'], _now()))

    def get(self, request):
        params = intake.validate(intake.CatalogQueryParams, request.GET)
        limit = params.get('limit')
        if limit is None:
            limit = settings.SEARCH_GET_DEFAULT_LIMIT
        category, test_type = params['category'], params['type']

        outcome = self.get_pipeline().local_suggestions(
            TESTS, params['q'], limit, category=category, test_type=test_type,
        )
        return JsonResponse(serialize_outcome(
            outcome, params['q'], _now(),
            category=category or None,
            type=test_type or None,
        ))


class CompletionView(ExceptionHandlerMixin, CatalogViewMixin, View):
    """GET /api/autocomplete/completions/?q=&catalog=medicines&limit= - name completions only"""

    def get(self, request):
        params = intake.validate(intake.CompletionQueryParams, request.GET)
        outcome = self.get_pipeline().completions(params['q'], params.get('limit'), kind=params['catalog'])
        return JsonResponse({
            'completions': [e.payload for e in outcome.entries if e.kind is EntryKind.COMPLETION],
            'query': params['q'],
            'timestamp': _now(),
        })


class CatalogRecordView(ExceptionHandlerMixin, CatalogViewMixin, View):
    """GET /api/catalog/<kind>/<record_id>/ - single record lookup"""

    kind = MEDICINES

    def get(self, request, record_id):
        store = self.get_registry().get_store(self.kind)
        record = store.get_by_id(record_id)
        if record is None:
            raise NotFoundError(
                message=f"No {self.kind} catalog entry with id {record_id!r}.",
                code='MEDICATION_NOT_FOUND' if self.kind == MEDICINES else 'TEST_NOT_FOUND',
                detail={'id': record_id},
            )
        serialize = serialize_medication_detail if self.kind == MEDICINES else serialize_test_detail
        return JsonResponse(serialize(record))


@method_decorator(csrf_exempt, name='dispatch')
class DiagnosisSuggestionView(ExceptionHandlerMixin, CatalogViewMixin, View):
    """
    POST /api/suggestions/diagnosis/ - medications for a diagnosis

    先问远程 LLM 要药名，再用本地 catalog 解析；
    远程不可用或答非所问时，降级到本地 indication 匹配并标记 fallback。
    """

    def post(self, request):
        data = intake.validate(intake.DiagnosisSuggestionRequest, intake.parse_json_body(request))
        diagnosis = data['diagnosis']
        limit = data.get('limit')
        context = ClinicalContext.from_payload(data.get('context'))
        pipeline = self.get_pipeline()

        try:
            service = get_llm_service()
            result = service.suggest_medications(
                diagnosis, data['symptoms'], max_names=settings.SEARCH_MAX_LIMIT,
            )
            outcome = pipeline.suggest_for_names(result.names, context, limit)
            if not outcome.total:
                raise UpstreamUnavailableError(
                    "Suggested medications are not in the catalog",
                    code='UPSTREAM_NO_CATALOG_MATCH',
                    detail={'names': result.names},
                )
            logger.info("[DiagnosisSuggestionView] %s suggested %d catalog matches", result.model, len(outcome))
        except UpstreamUnavailableError as exc:
            logger.warning("[DiagnosisSuggestionView] remote suggestions unavailable (%s), using local indications", exc.code)
            outcome = pipeline.suggest_for_diagnosis(diagnosis, context, limit)
            return JsonResponse(serialize_outcome(outcome, diagnosis, _now(), fallback=True))

        return JsonResponse(serialize_outcome(outcome, diagnosis, _now()))
