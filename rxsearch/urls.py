from django.urls import path

from .catalog.registry import MEDICINES, TESTS
from .views import (
    CatalogRecordView,
    CompletionView,
    DiagnosisSuggestionView,
    MedicineAutocompleteView,
    TestAutocompleteView,
)

urlpatterns = [
    path('autocomplete/medicines/', MedicineAutocompleteView.as_view(), name='autocomplete-medicines'),
    path('autocomplete/tests/', TestAutocompleteView.as_view(), name='autocomplete-tests'),
    path('autocomplete/completions/', CompletionView.as_view(), name='autocomplete-completions'),
    path('catalog/medicines/<str:record_id>/', CatalogRecordView.as_view(kind=MEDICINES), name='medication-detail'),
    path('catalog/tests/<str:record_id>/', CatalogRecordView.as_view(kind=TESTS), name='test-detail'),
    path('suggestions/diagnosis/', DiagnosisSuggestionView.as_view(), name='diagnosis-suggestions'),
]
