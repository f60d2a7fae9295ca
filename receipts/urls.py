from django.urls import path
from . import views

urlpatterns = [
    path('api/session/', views.get_session, name='get_session'),
    path('api/session/reset/', views.reset_session, name='reset_session'),
    path('api/members/', views.add_member, name='add_member'),
    path('api/members/<str:participant_id>/', views.rename_member, name='rename_member'),
    path('api/members/<str:participant_id>/delete/', views.remove_member, name='remove_member'),
    path('api/receipt/upload/', views.upload_receipt, name='upload_receipt'),
    path('api/receipt/process/', views.process_receipt, name='process_receipt'),
    path('api/receipt/parse/', views.parse_text, name='parse_text'),
    path('api/receipt/items/', views.add_item, name='add_item'),
    path('api/receipt/items/<str:item_id>/', views.update_item, name='update_item'),
    path('api/receipt/items/<str:item_id>/delete/', views.remove_item, name='remove_item'),
    path('api/receipt/items/<str:item_id>/assign/', views.toggle_assignment, name='toggle_assignment'),
    path('api/receipt/totals/', views.update_totals, name='update_totals'),
    path('api/settlement/', views.get_settlement, name='get_settlement'),
]
