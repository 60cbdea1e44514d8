from __future__ import annotations
from datetime import date, timedelta
import click
from flask import Flask
from .extensions import db
from .models import Subscriber, User, Citizen, Professional, Care, Regulation, Schedule
from .utils.dates import utcnow

def register_seed_command(app: Flask):
    @app.cli.command("seed")
    def seed():
        """Cria dados de teste (município, gestão, cidadãos, regulações e agendamentos)."""
        created = 0

        sub = Subscriber.query.filter_by(name="SMS Exemplo").first()
        if not sub:
            sub = Subscriber(name="SMS Exemplo", municipality="Exemplo/SP")
            db.session.add(sub)
            db.session.flush()

        def upsert_user(matricula, nome, email, role):
            nonlocal created
            u = User.query.filter_by(matricula=matricula).first()
            if not u:
                u = User(matricula=matricula, nome=nome, email=email, role=role, status="active", subscriber_id=sub.id)
                u.set_password("admin123")
                db.session.add(u)
                created += 1
            else:
                u.nome = nome
                u.email = email
                u.role = role
                u.status = "active"
                u.subscriber_id = sub.id
            return u

        upsert_user("9001", "Gestão", "gestao@local", "manager")
        upsert_user("1001", "Regulador", "regulador@local", "regulator")

        if Regulation.query.filter_by(subscriber_id=sub.id).count() == 0:
            care = Care(subscriber_id=sub.id, name="Consulta em Cardiologia")
            exam = Care(subscriber_id=sub.id, name="Ultrassonografia de Abdômen")
            prof = Professional(subscriber_id=sub.id, name="Dra. Ana Souza", specialty="Cardiologia")
            db.session.add_all([care, exam, prof])

            people = [
                ("Maria da Silva", "52998224725", "898001160660008", date(1958, 3, 14)),
                ("José Pereira", "11144477735", "700000000000005", date(1971, 11, 2)),
                ("Ana Oliveira", "39053344705", None, date(1990, 6, 30)),
            ]
            tomorrow = utcnow().replace(hour=8, minute=0, second=0, microsecond=0) + timedelta(days=1)
            for i, (name, cpf, cns, birth) in enumerate(people):
                c = Citizen(subscriber_id=sub.id, name=name, cpf=cpf, cns=cns, birth_date=birth)
                db.session.add(c)
                db.session.flush()

                r = Regulation(
                    subscriber_id=sub.id,
                    citizen_id=c.id,
                    protocol_number=f"REG-{utcnow().year}-{i + 1:05d}",
                    cares=[care if i % 2 == 0 else exam],
                )
                db.session.add(r)
                db.session.flush()

                db.session.add(Schedule(
                    subscriber_id=sub.id,
                    regulation_id=r.id,
                    citizen_id=c.id,
                    professional_id=prof.id,
                    scheduled_date=tomorrow + timedelta(minutes=30 * i),
                ))

        db.session.commit()
        click.echo(f"Seed concluído. Usuários criados: {created}")
