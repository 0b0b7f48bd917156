"""
Views per l'app users: autenticazione e dashboard.
"""

import logging
from datetime import timedelta

from django.contrib import messages
from django.contrib.auth import login, logout
from django.contrib.auth.decorators import login_required
from django.db.models import Q
from django.shortcuts import redirect, render
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from .forms import LoginForm

logger = logging.getLogger(__name__)


# ============================================================================
# AUTENTICAZIONE
# ============================================================================


@require_http_methods(["GET", "POST"])
def login_view(request):
    """
    Vista login.

    - GET: mostra form login
    - POST: autentica user e redirect a dashboard

    Remember me: imposta sessione a 30 giorni
    """
    if request.user.is_authenticated:
        return redirect("dashboard")

    if request.method == "POST":
        form = LoginForm(request, data=request.POST)

        if form.is_valid():
            user = form.get_user()
            login(request, user)

            if form.cleaned_data.get("remember_me"):
                request.session.set_expiry(60 * 60 * 24 * 30)
            else:
                request.session.set_expiry(0)

            logger.info(f"Login effettuato: {user.username}")
            messages.success(
                request, f"Benvenuto, {user.get_full_name() or user.username}!"
            )

            next_url = request.GET.get("next") or request.POST.get("next")
            if next_url:
                return redirect(next_url)
            return redirect("dashboard")

        messages.error(request, "Credenziali non valide. Riprova.")

    else:
        form = LoginForm(request)

    return render(request, "users/login.html", {"form": form})


@require_http_methods(["GET", "POST"])
def logout_view(request):
    logout(request)
    messages.info(request, "Logout effettuato con successo.")
    return redirect("users:login")


# ============================================================================
# DASHBOARD
# ============================================================================


@login_required
def dashboard_view(request):
    """
    Dashboard centrale del comitato.

    Visualizza:
    - Prossimi eventi
    - Attività aperte e scadute
    - Idee nuove
    - Saldo del mese
    - Messaggi urgenti attivi
    """
    from attivita.models import Attivita
    from comunicazioni.models import MessaggioUrgente
    from eventi.models import Evento
    from idee.models import Idea
    from spese.models import Spesa

    now = timezone.now()
    oggi = timezone.localdate()

    prossimi_eventi = (
        Evento.objects.filter(is_active=True, data_inizio__gte=now)
        .filter(archiviato_at__isnull=True)
        .exclude(stato="cancelled")
        .order_by("data_inizio")[:5]
    )

    attivita_aperte = Attivita.objects.filter(is_active=True).exclude(
        stato__in=["completed", "cancelled"]
    )

    spese_mese = Spesa.objects.filter(
        is_active=True, data_spesa__year=oggi.year, data_spesa__month=oggi.month
    )

    stats = {
        "eventi_prossimi_30gg": Evento.objects.filter(
            is_active=True,
            data_inizio__gte=now,
            data_inizio__lte=now + timedelta(days=30),
        ).count(),
        "attivita_aperte": attivita_aperte.count(),
        "attivita_scadute": attivita_aperte.filter(scadenza__lt=oggi).count(),
        "idee_nuove": Idea.objects.filter(is_active=True, stato="new").count(),
        "saldo_mese": Spesa.totali(spese_mese)["saldo"],
        "messaggi_urgenti_attivi": MessaggioUrgente.objects.attivi_oggi().count(),
    }

    attivita_urgenti = attivita_aperte.filter(
        Q(priorita="urgent") | Q(scadenza__lt=oggi)
    ).order_by("scadenza")[:5]

    context = {
        "stats": stats,
        "today": oggi,
        "prossimi_eventi": prossimi_eventi,
        "attivita_urgenti": attivita_urgenti,
    }

    return render(request, "users/dashboard.html", context)
